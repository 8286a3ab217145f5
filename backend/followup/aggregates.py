"""Agregações recalculadas a cada leitura: busca, agrupamento e pontos."""

from collections import OrderedDict

UNKNOWN_PATIENT = "Unknown Patient"


def _contains(value, query):
    return value is not None and query in value.lower()


def patient_display_name(patient):
    """Nome do paciente ou o marcador usado para registros órfãos."""
    if patient is None:
        return UNKNOWN_PATIENT
    return patient.full_name


def filter_patients(patients, search):
    """
    Filtro sem diferenciar maiúsculas por substring em nome, sobrenome,
    código, e-mail e condição. Busca vazia devolve tudo.
    """
    if not search:
        return list(patients)
    query = search.lower()
    return [
        p for p in patients
        if _contains(p.first_name, query)
        or _contains(p.last_name, query)
        or _contains(p.code_number, query)
        or _contains(p.email, query)
        or _contains(p.condition, query)
    ]


def _patient_matches(patient, query):
    return patient is not None and (
        _contains(patient.first_name, query)
        or _contains(patient.last_name, query)
        or _contains(patient.code_number, query)
    )


def filter_appointments(appointments, patients_by_id, search):
    if not search:
        return list(appointments)
    query = search.lower()
    return [
        a for a in appointments
        if _patient_matches(patients_by_id.get(a.patient_id), query)
        or _contains(a.type, query)
        or _contains(a.status, query)
        or query in (a.date or "")
    ]


def group_by_date(appointments):
    """
    Agrupa por igualdade exata da data e ordena as chaves como texto.
    A ordem só é cronológica porque a data é ISO com zeros à esquerda.
    """
    grouped = {}
    for appointment in appointments:
        grouped.setdefault(appointment.date, []).append(appointment)
    return OrderedDict((day, grouped[day]) for day in sorted(grouped))


def filter_rewards(rewards, patients_by_id, search):
    if not search:
        return list(rewards)
    query = search.lower()
    return [
        r for r in rewards
        if _patient_matches(patients_by_id.get(r.patient_id), query)
        or _contains(r.action, query)
    ]


def reward_balances(rewards):
    """Soma de pontos por paciente sobre todo o histórico."""
    balances = {}
    for reward in rewards:
        balances[reward.patient_id] = balances.get(reward.patient_id, 0) + (reward.points or 0)
    return balances


def patient_balance(rewards, patient_id):
    return sum(r.points or 0 for r in rewards if r.patient_id == patient_id)


def top_patients(rewards, patients_by_id, limit=4):
    """Ranking decrescente por pontos; recompensas órfãs ficam de fora."""
    ranked = sorted(reward_balances(rewards).items(), key=lambda item: item[1], reverse=True)
    output = []
    if limit <= 0:
        return output
    for patient_id, points in ranked:
        patient = patients_by_id.get(patient_id)
        if patient is None:
            continue
        output.append({
            "patient_id": patient_id,
            "patient_name": patient.full_name,
            "code_number": patient.code_number,
            "points": points,
        })
        if len(output) == limit:
            break
    return output


def dashboard_stats(patients, appointments):
    return {
        "patient_count": len(patients),
        "appointment_count": len(appointments),
        "pending_appointments": sum(1 for a in appointments if a.status == "pending"),
        "completed_appointments": sum(1 for a in appointments if a.status == "completed"),
        "high_risk_patients": sum(1 for p in patients if p.risk_level == "high"),
    }

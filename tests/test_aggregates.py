"""
Unit tests for the read-time aggregations (no database).
"""

from followup.aggregates import (
    UNKNOWN_PATIENT, filter_patients, group_by_date, patient_balance,
    patient_display_name, reward_balances, top_patients,
)
from followup.models import Appointment, Patient, Reward


def make_patient(id, first_name, last_name, code_number, email=None, condition=None):
    return Patient(id=id, first_name=first_name, last_name=last_name, code_number=code_number,
                   email=email, condition=condition, risk_level="low")


def test_filter_patients_handles_missing_optional_fields():
    patients = [
        make_patient(1, "Jane", "Doe", "P100"),
        make_patient(2, "Mark", "Lee", "X200", email="mark@clinic.org", condition="Asthma"),
    ]
    assert [p.id for p in filter_patients(patients, "asth")] == [2]
    assert [p.id for p in filter_patients(patients, "")] == [1, 2]
    assert filter_patients(patients, "nobody") == []


def test_group_by_date_sorts_keys_lexicographically():
    appointments = [
        Appointment(id=1, date="2025-10-01", time="09:00"),
        Appointment(id=2, date="2025-02-15", time="10:00"),
        Appointment(id=3, date="2025-10-01", time="11:00"),
    ]
    grouped = group_by_date(appointments)
    assert list(grouped) == ["2025-02-15", "2025-10-01"]
    assert [a.id for a in grouped["2025-10-01"]] == [1, 3]


def test_balances_are_sums_over_history():
    rewards = [
        Reward(patient_id=1, points=50),
        Reward(patient_id=1, points=30),
        Reward(patient_id=2, points=5),
        Reward(patient_id=None, points=100),
    ]
    assert reward_balances(rewards) == {1: 80, 2: 5, None: 100}
    assert patient_balance(rewards, 1) == 80
    assert patient_balance(rewards, 3) == 0


def test_top_patients_skips_orphans():
    patients = {1: make_patient(1, "Jane", "Doe", "P100"), 2: make_patient(2, "Mark", "Lee", "X200")}
    rewards = [Reward(patient_id=None, points=100), Reward(patient_id=2, points=5),
               Reward(patient_id=1, points=80)]
    ranking = top_patients(rewards, patients)
    assert [r["patient_id"] for r in ranking] == [1, 2]
    assert top_patients(rewards, patients, limit=0) == []


def test_display_name_placeholder():
    assert patient_display_name(None) == UNKNOWN_PATIENT
    assert patient_display_name(make_patient(1, "Jane", "Doe", "P100")) == "Jane Doe"

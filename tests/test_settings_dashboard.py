"""
Tests for settings (doctor display name) and dashboard counts.
"""


class TestSettings:

    def test_default_doctor_name(self, client, auth_header):
        data = client.get('/api/settings/', headers=auth_header).get_json()
        assert data == {"doctor_name": "Dr. Sarah Mitchell"}

    def test_update_persists(self, client, auth_header):
        response = client.put('/api/settings/', json={"doctor_name": "Dr. House"}, headers=auth_header)
        assert response.status_code == 200
        client.put('/api/settings/', json={"doctor_name": "Dr. Grey"}, headers=auth_header)
        assert client.get('/api/settings/', headers=auth_header).get_json()["doctor_name"] == "Dr. Grey"

    def test_blank_name_rejected(self, client, auth_header):
        response = client.put('/api/settings/', json={"doctor_name": "  "}, headers=auth_header)
        assert response.status_code == 400
        assert "doctor_name" in response.get_json()["errors"]


class TestDashboard:

    def test_counts(self, client, auth_header, create_patient):
        jane = create_patient(risk_level="high")
        create_patient(first_name="Mark", code_number="X200")
        for status in ("pending", "pending", "completed", "cancelled"):
            client.post('/api/appointments/',
                        json={"patient_id": jane, "date": "2025-03-01", "time": "09:00",
                              "type": "Follow-up", "status": status},
                        headers=auth_header)

        data = client.get('/api/dashboard/', headers=auth_header).get_json()
        assert data["patient_count"] == 2
        assert data["appointment_count"] == 4
        assert data["pending_appointments"] == 2
        assert data["completed_appointments"] == 1
        assert data["high_risk_patients"] == 1
        assert data["doctor_name"] == "Dr. Sarah Mitchell"

    def test_requires_login(self, client):
        assert client.get('/api/dashboard/').status_code == 401

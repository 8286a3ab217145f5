"""
Tests for the reward endpoints:
- GET/POST /api/rewards/
- GET /api/rewards/balance/<patient_id>
- GET /api/rewards/top
- GET /api/rewards/actions
"""


def add_reward(client, auth_header, patient_id, points, action="appointment_attendance"):
    return client.post('/api/rewards/', json={"patient_id": patient_id, "points": points, "action": action},
                       headers=auth_header)


class TestAddReward:

    def test_two_rewards_sum_in_top_patients(self, client, auth_header, create_patient):
        patient_id = create_patient()
        assert add_reward(client, auth_header, patient_id, 50).status_code == 201
        assert add_reward(client, auth_header, patient_id, 30).status_code == 201

        data = client.get('/api/rewards/top', headers=auth_header).get_json()
        assert data["patients"] == [
            {"patient_id": patient_id, "patient_name": "Jane Doe", "code_number": "P100", "points": 80}
        ]

    def test_balance_increases_by_points(self, client, auth_header, create_patient):
        patient_id = create_patient()
        before = client.get(f'/api/rewards/balance/{patient_id}', headers=auth_header).get_json()
        assert before["points"] == 0

        add_reward(client, auth_header, patient_id, 15)
        after = client.get(f'/api/rewards/balance/{patient_id}', headers=auth_header).get_json()
        assert after["points"] == 15
        assert after["entries"] == 1

    def test_non_positive_points_rejected(self, client, auth_header, create_patient):
        patient_id = create_patient()
        assert add_reward(client, auth_header, patient_id, 0).status_code == 400
        assert add_reward(client, auth_header, patient_id, -10).status_code == 400

    def test_points_above_integer_column_rejected(self, client, auth_header, create_patient):
        patient_id = create_patient()
        response = add_reward(client, auth_header, patient_id, 10 ** 20)
        assert response.status_code == 400
        assert client.get('/api/rewards/', headers=auth_header).get_json()["count"] == 0

    def test_largest_points_value_accepted(self, client, auth_header, create_patient):
        patient_id = create_patient()
        assert add_reward(client, auth_header, patient_id, 2147483647).status_code == 201

    def test_missing_action_rejected(self, client, auth_header, create_patient):
        patient_id = create_patient()
        response = add_reward(client, auth_header, patient_id, 10, action="")
        assert response.status_code == 400

    def test_rewards_cannot_be_edited_or_deleted(self, client, auth_header, create_patient):
        patient_id = create_patient()
        reward_id = add_reward(client, auth_header, patient_id, 10).get_json()["id"]
        assert client.delete(f'/api/rewards/{reward_id}', headers=auth_header).status_code in (404, 405)
        assert client.put(f'/api/rewards/{reward_id}', json={}, headers=auth_header).status_code in (404, 405)


class TestRanking:

    def test_sorted_descending_and_limited(self, client, auth_header, create_patient):
        ids = [create_patient(first_name=f"P{i}", code_number=f"C{i}") for i in range(5)]
        for points, patient_id in zip([10, 50, 30, 40, 20], ids):
            add_reward(client, auth_header, patient_id, points)

        data = client.get('/api/rewards/top', headers=auth_header).get_json()
        assert [p["points"] for p in data["patients"]] == [50, 40, 30, 20]

        data = client.get('/api/rewards/top?limit=2', headers=auth_header).get_json()
        assert [p["points"] for p in data["patients"]] == [50, 40]

    def test_orphaned_rewards_listed_but_not_ranked(self, client, auth_header, create_patient):
        patient_id = create_patient()
        add_reward(client, auth_header, patient_id, 25)
        client.delete(f'/api/patients/{patient_id}?confirm=true', headers=auth_header)

        listing = client.get('/api/rewards/', headers=auth_header).get_json()
        assert listing["rewards"][0]["patient_name"] == "Unknown Patient"
        top = client.get('/api/rewards/top', headers=auth_header).get_json()
        assert top["patients"] == []


class TestSearchRewards:

    def test_search_by_action_and_patient(self, client, auth_header, create_patient):
        jane = create_patient()
        mark = create_patient(first_name="Mark", last_name="Lee", code_number="X200")
        add_reward(client, auth_header, jane, 10, action="referral")
        add_reward(client, auth_header, mark, 10, action="medication_adherence")

        data = client.get('/api/rewards/?search=REFERRAL', headers=auth_header).get_json()
        assert [r["patient_name"] for r in data["rewards"]] == ["Jane Doe"]
        data = client.get('/api/rewards/?search=lee', headers=auth_header).get_json()
        assert [r["action"] for r in data["rewards"]] == ["medication_adherence"]


def test_actions_catalogue(client):
    data = client.get('/api/rewards/actions').get_json()
    assert "referral" in [a["value"] for a in data["actions"]]

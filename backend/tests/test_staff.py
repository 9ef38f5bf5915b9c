"""
Tests for /api/staff.
"""


def _new_staff(**overrides):
    body = {
        'staff_name': 'Mary Kamau',
        'work_type': 'Employment',
        'staff_role': 'Accountant',
        'personal_email': 'mary@example.com',
        'date_joined': '2024-02-01',
    }
    body.update(overrides)
    return body


class TestListStaff:
    def test_list(self, client, seed):
        res = client.get('/api/staff')
        assert res.status_code == 200
        body = res.json()
        assert body['count'] == 2
        # newest first
        assert body['data'][0]['staff_name'] == 'Peter Otieno'
        assert body['data'][0]['department_name'] == 'Research'

    def test_filter_work_type(self, client, seed):
        res = client.get('/api/staff', params={'workType': 'Consultancy'})
        assert [s['staff_id'] for s in res.json()['data']] == [seed['peter']]

    def test_filter_invalid_work_type(self, client, seed):
        res = client.get('/api/staff', params={'workType': 'Freelance'})
        assert res.status_code == 400
        assert res.json()['message'] == "Invalid work type. Must be one of: Employment, Consultancy, Internship"

    def test_pagination(self, client, seed):
        res = client.get('/api/staff', params={'page': 1, 'limit': 1})
        assert res.json()['count'] == 1

    def test_by_work_type(self, client, seed):
        res = client.get('/api/staff/work-type/Employment')
        assert res.status_code == 200
        assert [s['staff_name'] for s in res.json()['data']] == ['Jane Wanjiru']

    def test_by_unknown_work_type(self, client, seed):
        assert client.get('/api/staff/work-type/Freelance').status_code == 400


class TestGetStaff:
    def test_get(self, client, seed):
        data = client.get(f"/api/staff/{seed['jane']}").json()['data']
        assert data['username'] == 'jwanjiru'
        assert data['status'] == 'Active'
        assert data['date_joined'] == '2023-01-15'

    def test_get_missing(self, client, seed):
        res = client.get('/api/staff/999')
        assert res.status_code == 404
        assert res.json() == {
            'status': 'error',
            'statusCode': 404,
            'message': "Staff member with ID 999 not found",
        }

    def test_get_non_numeric(self, client, seed):
        res = client.get('/api/staff/abc')
        assert res.status_code == 400
        assert res.json()['message'] == "Validation failed"


class TestWriteStaff:
    def test_create(self, client, seed):
        res = client.post('/api/staff', json=_new_staff(department_id=seed['department']))
        assert res.status_code == 201
        data = res.json()['data']
        assert data['username'] == 'mkamau'
        assert data['status'] == 'Active'
        assert data['department_id'] == seed['department']

    def test_create_duplicate_email(self, client, seed):
        res = client.post('/api/staff', json=_new_staff(personal_email='jane@example.com'))
        assert res.status_code == 400
        assert res.json()['message'] == "Email already exists"

    def test_create_invalid_email(self, client, seed):
        res = client.post('/api/staff', json=_new_staff(personal_email='not-an-email'))
        assert res.status_code == 400

    def test_create_unknown_department(self, client, seed):
        res = client.post('/api/staff', json=_new_staff(department_id=999))
        assert res.status_code == 400
        assert res.json()['message'] == "Department ID does not exist"

    def test_create_invalid_gender(self, client, seed):
        res = client.post('/api/staff', json=_new_staff(gender='Unknown'))
        assert res.status_code == 400

    def test_create_duplicate_username(self, client, seed):
        res = client.post('/api/staff', json=_new_staff(username='jwanjiru'))
        assert res.status_code == 400
        assert res.json()['message'] == "Username already exists"

    def test_put(self, client, seed):
        res = client.put(f"/api/staff/{seed['peter']}", json={'staff_role': 'Senior Analyst'})
        assert res.status_code == 200
        assert res.json()['data']['staff_role'] == 'Senior Analyst'
        assert res.json()['data']['personal_email'] == 'peter@example.com'

    def test_patch_status(self, client, seed):
        res = client.patch(f"/api/staff/{seed['peter']}", json={'status': 'Suspended'})
        assert res.json()['data']['status'] == 'Suspended'

    def test_update_empty(self, client, seed):
        res = client.put(f"/api/staff/{seed['peter']}", json={})
        assert res.status_code == 400
        assert res.json()['message'] == "No fields to update"

    def test_update_null_role(self, client, seed):
        res = client.patch(f"/api/staff/{seed['peter']}", json={'staff_role': None})
        assert res.status_code == 400
        assert res.json()['message'] == "Staff role is required"

    def test_update_missing(self, client, seed):
        assert client.patch('/api/staff/999', json={'staff_role': 'x'}).status_code == 404

    def test_update_own_email_allowed(self, client, seed):
        res = client.patch(f"/api/staff/{seed['jane']}", json={'personal_email': 'jane@example.com'})
        assert res.status_code == 200

    def test_delete(self, client, seed):
        new_id = client.post('/api/staff', json=_new_staff()).json()['data']['staff_id']
        res = client.delete(f'/api/staff/{new_id}')
        assert res.status_code == 200
        assert client.get(f'/api/staff/{new_id}').status_code == 404

    def test_delete_department_head(self, client, seed):
        res = client.delete(f"/api/staff/{seed['jane']}")
        assert res.status_code == 400
        assert 'heads a department' in res.json()['message']

    def test_delete_with_timesheets(self, client, entries, seed):
        new_id = client.post('/api/staff', json=_new_staff()).json()['data']['staff_id']
        client.post('/api/timesheets', json={
            'staff_id': new_id, 'department_id': seed['department'], 'date': '2024-05-01',
            'check_in_time': '08:00', 'check_out_time': '09:00',
            'task_description': 'Onboarding session', 'task_type': 'HR', 'task_station': 'Office',
        })
        res = client.delete(f'/api/staff/{new_id}')
        assert res.status_code == 400
        assert res.json()['message'] == "Cannot delete staff member with existing timesheet entries."

    def test_delete_client_manager(self, client, seed):
        new_id = client.post('/api/staff', json=_new_staff()).json()['data']['staff_id']
        client.post('/api/clients', json={
            'client_name': 'Bright Start', 'sector': 'Startup', 'category': 'Prospect',
            'account_manager_id': new_id,
        })
        res = client.delete(f'/api/staff/{new_id}')
        assert res.status_code == 400
        assert res.json()['message'] == "Cannot delete staff member who manages clients. Reassign the clients first."

    def test_delete_project_manager(self, client, seed):
        new_id = client.post('/api/staff', json=_new_staff()).json()['data']['staff_id']
        client.patch(f"/api/projects/{seed['quarry']}", json={'account_manager': new_id})
        res = client.delete(f'/api/staff/{new_id}')
        assert res.status_code == 400
        assert res.json()['message'] == "Cannot delete staff member who manages projects. Reassign the projects first."

    def test_delete_missing(self, client, seed):
        assert client.delete('/api/staff/999').status_code == 404

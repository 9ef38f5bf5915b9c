"""
Tests for /api/projects.
"""


class TestReadProjects:
    def test_list(self, client, seed):
        data = client.get('/api/projects').json()['data']
        # newest start date first
        assert [p['project_name'] for p in data] == ['Water Access Study', 'Quarry Survey']
        assert data[0]['is_active'] is True
        assert data[1]['is_active'] is False
        assert data[0]['client_name'] == 'Acme Foundation'

    def test_active(self, client, seed):
        data = client.get('/api/projects/active').json()['data']
        assert [p['project_id'] for p in data] == [seed['water']]

    def test_by_cluster(self, client, seed):
        data = client.get('/api/projects/cluster/Stone').json()['data']
        assert [p['project_id'] for p in data] == [seed['quarry']]

    def test_by_invalid_cluster(self, client, seed):
        assert client.get('/api/projects/cluster/Gravel').status_code == 400

    def test_by_account_manager(self, client, seed):
        data = client.get(f"/api/projects/account-manager/{seed['jane']}").json()['data']
        assert [p['project_id'] for p in data] == [seed['water']]
        assert data[0]['account_manager_name'] == 'Jane Wanjiru'

    def test_totals(self, client, entries, seed):
        data = client.get(f"/api/projects/{seed['water']}").json()['data']
        assert data['total_hours'] == 12.5
        assert data['staff_count'] == 2
        assert data['timesheet_count'] == 2

    def test_get_missing(self, client, seed):
        assert client.get('/api/projects/999').status_code == 404

    def test_timesheets(self, client, entries, seed):
        data = client.get(f"/api/projects/{seed['water']}/timesheets").json()['data']
        assert [t['date'] for t in data] == ['2024-03-02', '2024-03-01']

    def test_staff_breakdown(self, client, entries, seed):
        data = client.get(f"/api/projects/{seed['water']}/staff").json()['data']
        assert [s['staff_name'] for s in data] == ['Peter Otieno', 'Jane Wanjiru']
        assert data[0]['total_hours'] == 8.0

    def test_staff_breakdown_missing(self, client, seed):
        assert client.get('/api/projects/999/staff').status_code == 404


class TestWriteProjects:
    def test_create(self, client, seed):
        res = client.post('/api/projects', json={
            'project_name': 'Sand Harvesting Audit', 'client_id': seed['council'],
            'start_date': '2024-05-01', 'end_date': '2024-09-30', 'cluster': 'Sand',
        })
        assert res.status_code == 201
        assert res.json()['data']['cluster'] == 'Sand'

    def test_create_end_before_start(self, client, seed):
        res = client.post('/api/projects', json={
            'project_name': 'Backwards', 'client_id': seed['council'],
            'start_date': '2024-05-01', 'end_date': '2024-04-01', 'cluster': 'Sand',
        })
        assert res.status_code == 400
        assert res.json()['message'] == "End date must be on or after start date"

    def test_create_unknown_client(self, client, seed):
        res = client.post('/api/projects', json={
            'project_name': 'Orphan', 'client_id': 999, 'start_date': '2024-05-01', 'cluster': 'Sand',
        })
        assert res.status_code == 400
        assert res.json()['message'] == "Client ID does not exist"

    def test_update_invalid_cluster(self, client, seed):
        res = client.put(f"/api/projects/{seed['water']}", json={'cluster': 'Gravel'})
        assert res.status_code == 400
        assert res.json()['message'] == "Invalid cluster. Must be one of: Stone, Ballast, Sand, Water"

    def test_update_end_before_stored_start(self, client, seed):
        res = client.patch(f"/api/projects/{seed['water']}", json={'end_date': '2023-06-01'})
        assert res.status_code == 400

    def test_close_project(self, client, seed):
        res = client.patch(f"/api/projects/{seed['water']}", json={'end_date': '2024-06-30'})
        assert res.status_code == 200
        assert res.json()['data']['is_active'] is False

    def test_move_to_other_client_moves_entries(self, client, entries, seed):
        res = client.patch(f"/api/projects/{seed['water']}", json={'client_id': seed['council']})
        assert res.status_code == 200
        rows = client.get('/api/timesheets', params={'projectId': seed['water']}).json()['data']
        assert {row['client_id'] for row in rows} == {seed['council']}
        council = client.get(f"/api/timesheets/clients/{seed['council']}/hours").json()['data']
        assert council['total_hours'] == 12.5
        acme = client.get(f"/api/timesheets/clients/{seed['acme']}/hours").json()['data']
        assert acme['total_hours'] == 0.0

    def test_moved_entry_still_updatable_with_client(self, client, entries, seed):
        client.patch(f"/api/projects/{seed['water']}", json={'client_id': seed['council']})
        res = client.patch(f'/api/timesheets/{entries[0]}', json={'client_id': seed['council']})
        assert res.status_code == 200
        assert res.json()['data']['client_name'] == 'City Council'

    def test_same_client_leaves_entries(self, client, entries, seed):
        res = client.put(f"/api/projects/{seed['water']}", json={'client_id': seed['acme']})
        assert res.status_code == 200
        rows = client.get('/api/timesheets', params={'projectId': seed['water']}).json()['data']
        assert {row['client_id'] for row in rows} == {seed['acme']}

    def test_delete_with_timesheets(self, client, entries, seed):
        assert client.delete(f"/api/projects/{seed['water']}").status_code == 400

    def test_delete(self, client, seed):
        assert client.delete(f"/api/projects/{seed['quarry']}").status_code == 200
        assert client.delete(f"/api/projects/{seed['quarry']}").status_code == 404

"""
Tests for the admin option lists and lookup endpoints
"""
import pytest
from services.settings_repository import DEFAULT_SYSTEM_CONFIG


@pytest.mark.integration
class TestSystemConfig:
    """Tests for /api/admin/system-config"""

    def test_defaults_returned(self, admin_client):
        config = admin_client.get('/api/admin/system-config').get_json()['config']
        assert config == DEFAULT_SYSTEM_CONFIG

    def test_replace_list(self, admin_client):
        response = admin_client.put('/api/admin/system-config', json={
            'cityApprovals': ['HUD', 'hud', ' Zoning Board ', '']
        })
        config = response.get_json()['config']
        assert config['cityApprovals'] == ['HUD', 'Zoning Board']
        assert config['legalDepartments'] == DEFAULT_SYSTEM_CONFIG['legalDepartments']

    def test_unknown_category_rejected(self, admin_client):
        response = admin_client.put('/api/admin/system-config', json={'colors': ['red']})
        assert response.status_code == 400

    def test_add_option(self, admin_client):
        response = admin_client.post('/api/admin/system-config/legalDepartments', json={'value': 'Patent Office'})
        assert response.get_json()['options'][-1] == 'Patent Office'

    def test_add_duplicate_option(self, admin_client):
        response = admin_client.post('/api/admin/system-config/legalDepartments', json={'value': 'sec'})
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Department already exists'

    def test_add_blank_option(self, admin_client):
        response = admin_client.post('/api/admin/system-config/dealBusinessNatures', json={'value': '  '})
        assert response.get_json()['error'] == 'Business nature name is required'

    def test_remove_option(self, admin_client):
        response = admin_client.delete('/api/admin/system-config/cityApprovals', json={'value': 'HUD'})
        assert 'HUD' not in response.get_json()['options']
        again = admin_client.delete('/api/admin/system-config/cityApprovals', json={'value': 'HUD'})
        assert again.status_code == 200

    def test_non_admin_can_read_but_not_write(self, make_user, client_for):
        manager = client_for(make_user('manager', name='Morgan Manager', email='morgan@example.com'))
        assert manager.get('/api/admin/system-config').status_code == 200
        assert manager.put('/api/admin/system-config', json={}).status_code == 403
        assert manager.post('/api/admin/system-config/cityApprovals', json={'value': 'X'}).status_code == 403


@pytest.mark.integration
class TestLookups:
    """Tests for sections, tags and stages"""

    def test_sections_seeded(self, admin_client):
        sections = admin_client.get('/api/sections').get_json()['sections']
        assert sorted(s['id'] for s in sections) == ['deals', 'legal', 'others', 'real-estate']

    def test_stages_in_order(self, admin_client):
        stages = admin_client.get('/api/stages').get_json()['stages']
        assert [s['name'] for s in stages] == ['Planning', 'Work in Progress', 'Pending Review', 'Completed']

    def test_create_tag(self, admin_client):
        response = admin_client.post('/api/tags', json={'name': 'Appeal'})
        assert response.status_code == 201
        assert response.get_json()['tag']['color'] == '#6b7280'
        assert [t['name'] for t in admin_client.get('/api/tags').get_json()['tags']] == ['Appeal']

    def test_tag_requires_name(self, admin_client):
        assert admin_client.post('/api/tags', json={}).status_code == 400

    def test_viewer_cannot_create_tags(self, make_user, client_for):
        viewer = client_for(make_user('viewer', name='Vic Viewer', email='vic@example.com'))
        assert viewer.post('/api/tags', json={'name': 'x'}).status_code == 403

    def test_anonymous_cannot_create_tags(self, client):
        response = client.post('/api/tags', json={'name': 'x'})
        assert response.status_code == 401
        assert response.get_json()['error'] == 'Authentication required'

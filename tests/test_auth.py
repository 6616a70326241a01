"""
Tests for authentication, the permission matrix and user management
"""
import pytest
import auth
from conftest import ADMIN_EMAIL, ADMIN_PASSWORD, USER_PASSWORD


def _user(role, user_id='u1'):
    return {'id': user_id, 'role': role}


@pytest.mark.unit
class TestPermissionMatrix:
    """Tests for the role based permission checks"""

    @pytest.mark.parametrize('role,expected', [
        ('admin', True), ('manager', True), ('staff', True), ('viewer', False)
    ])
    def test_can_create_item(self, role, expected):
        assert auth.can_create_item(_user(role)) is expected
        assert auth.can_create_task(_user(role)) is expected

    @pytest.mark.parametrize('role,expected', [
        ('admin', True), ('manager', True), ('staff', False), ('viewer', False)
    ])
    def test_can_delete(self, role, expected):
        assert auth.can_delete_item(_user(role)) is expected
        assert auth.can_delete_task(_user(role)) is expected

    def test_editors_edit_anything(self):
        record = {'created_by': 'someone-else', 'assignee_ids': []}
        assert auth.can_edit_item(_user('admin'), record) is True
        assert auth.can_edit_task(_user('manager'), record) is True

    def test_staff_edit_own_records(self):
        staff = _user('staff', 'u1')
        assert auth.can_edit_item(staff, {'created_by': 'u1', 'assignee_ids': []}) is True
        assert auth.can_edit_item(staff, {'created_by': 'u2', 'assignee_ids': ['u1']}) is True
        assert auth.can_edit_task(staff, {'created_by': 'u2', 'assignees': [{'id': 'u1'}]}) is True
        assert auth.can_edit_item(staff, {'created_by': 'u2', 'assignee_ids': ['u3']}) is False

    def test_viewer_never_edits(self):
        viewer = _user('viewer', 'u1')
        assert auth.can_edit_item(viewer, {'created_by': 'u1', 'assignee_ids': ['u1']}) is False

    def test_only_admin_reaches_admin(self):
        assert auth.can_access_admin(_user('admin')) is True
        assert auth.can_access_admin(_user('manager')) is False
        assert auth.can_manage_users(_user('staff')) is False

    def test_anonymous_has_no_permissions(self):
        assert not any(auth.permissions_for(None).values())


@pytest.mark.unit
class TestPasswordHashing:
    """Tests for the werkzeug hash helpers"""

    def test_hash_roundtrip(self):
        pwhash = auth.safe_generate_password_hash('s3cret-pass')
        assert pwhash.startswith('pbkdf2:sha256')
        assert auth.safe_check_password_hash(pwhash, 's3cret-pass') is True
        assert auth.safe_check_password_hash(pwhash, 'wrong') is False

    def test_missing_hash_never_matches(self):
        assert not auth.safe_check_password_hash(None, 'anything')


@pytest.mark.integration
class TestStoredPasswordHashes:
    """Tests that every stored password goes through the shared hash helper"""

    def _hash_for(self, email):
        from database.connection import get_db_session
        from database.models import User
        with get_db_session() as session:
            return session.query(User).filter(User.email == email).first().password_hash

    def test_seeded_admin_hash(self, app):
        pwhash = self._hash_for(ADMIN_EMAIL)
        assert pwhash.startswith('pbkdf2:sha256')
        assert auth.safe_check_password_hash(pwhash, ADMIN_PASSWORD)

    def test_created_and_updated_user_hashes(self, admin_client, make_user):
        user = make_user('staff', name='Hana Staff', email='hana@example.com')
        assert self._hash_for('hana@example.com').startswith('pbkdf2:sha256')

        admin_client.put(f"/api/users/{user['id']}", json={'password': 'another-pass-1'})
        pwhash = self._hash_for('hana@example.com')
        assert pwhash.startswith('pbkdf2:sha256')
        assert auth.safe_check_password_hash(pwhash, 'another-pass-1')


@pytest.mark.integration
class TestLoginFlow:
    """Tests for /api/auth/*"""

    def test_login_with_seeded_admin(self, client):
        response = client.post('/api/auth/login', json={'email': ADMIN_EMAIL, 'password': ADMIN_PASSWORD})
        assert response.status_code == 200
        data = response.get_json()
        assert data['user']['role'] == 'admin'
        assert data['permissions']['can_access_admin'] is True
        assert 'password_hash' not in data['user']

    def test_login_is_case_insensitive_on_email(self, client):
        response = client.post('/api/auth/login', json={'email': ADMIN_EMAIL.upper(), 'password': ADMIN_PASSWORD})
        assert response.status_code == 200

    def test_login_wrong_password(self, client):
        response = client.post('/api/auth/login', json={'email': ADMIN_EMAIL, 'password': 'nope'})
        assert response.status_code == 401
        assert response.get_json()['error'] == 'Invalid email or password'

    def test_login_missing_fields(self, client):
        response = client.post('/api/auth/login', json={'email': ADMIN_EMAIL})
        assert response.status_code == 400

    def test_deactivated_user_cannot_login(self, client, admin_client, make_user):
        user = make_user('staff', name='Dana Staff', email='dana@example.com')
        admin_client.post(f"/api/users/{user['id']}/toggle-active")
        response = client.post('/api/auth/login', json={'email': 'dana@example.com', 'password': USER_PASSWORD})
        assert response.status_code == 401
        assert response.get_json()['error'] == 'Account is deactivated'

    def test_me_requires_login(self, client):
        response = client.get('/api/auth/me')
        assert response.status_code == 401
        assert response.get_json()['success'] is False

    def test_me_and_logout(self, admin_client):
        assert admin_client.get('/api/auth/me').get_json()['user']['email'] == ADMIN_EMAIL
        admin_client.post('/api/auth/logout')
        assert admin_client.get('/api/auth/me').status_code == 401

    def test_change_password(self, client, make_user, client_for):
        user = make_user('staff', name='Pat Staff', email='pat@example.com')
        staff_client = client_for(user)
        short = staff_client.post('/api/auth/password', json={'new_password': 'short'})
        assert short.status_code == 400

        assert staff_client.post('/api/auth/password', json={'new_password': 'a-much-longer-one'}).status_code == 200
        relogin = client.post('/api/auth/login', json={'email': 'pat@example.com', 'password': 'a-much-longer-one'})
        assert relogin.status_code == 200


@pytest.mark.integration
class TestUserManagement:
    """Tests for /api/users"""

    def test_admin_creates_user_with_defaults(self, admin_client):
        response = admin_client.post('/api/users', json={'name': 'Lee Counsel', 'email': 'Lee@Example.com'})
        assert response.status_code == 201
        user = response.get_json()['user']
        assert user['email'] == 'lee@example.com'
        assert user['role'] == 'staff'
        assert user['timezone'] == 'America/New_York'
        assert user['notification_prefs']['mentions'] is True

    def test_duplicate_email_rejected(self, admin_client):
        admin_client.post('/api/users', json={'name': 'Lee', 'email': 'lee@example.com'})
        response = admin_client.post('/api/users', json={'name': 'Lee 2', 'email': 'LEE@example.com'})
        assert response.status_code == 400
        assert response.get_json()['error'] == 'A user with this email already exists'

    def test_missing_name_rejected(self, admin_client):
        response = admin_client.post('/api/users', json={'email': 'x@example.com'})
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Name and Email are required.'

    def test_non_admin_cannot_create_users(self, make_user, client_for):
        manager = client_for(make_user('manager', name='Morgan Manager', email='morgan@example.com'))
        response = manager.post('/api/users', json={'name': 'X', 'email': 'x@example.com'})
        assert response.status_code == 403

    def test_list_users_search(self, admin_client, make_user):
        make_user('manager', name='Morgan Manager', email='morgan@example.com')
        users = admin_client.get('/api/users?search=morgan').get_json()['users']
        assert [u['name'] for u in users] == ['Morgan Manager']

    def test_update_user_role(self, admin_client, make_user):
        user = make_user('staff', name='Sam Staff', email='sam@example.com')
        response = admin_client.put(f"/api/users/{user['id']}", json={'role': 'manager'})
        assert response.get_json()['user']['role'] == 'manager'

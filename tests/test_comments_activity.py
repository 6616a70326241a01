"""
Tests for comments, @mentions and the activity feed
"""
import pytest
from unittest.mock import MagicMock
from services.activity_logger import ActivityLogger, format_action
from services.comment_repository import extract_mentions

USERS = [
    {'id': 'u1', 'name': 'Ada Lovelace', 'email': 'ada@firm.com'},
    {'id': 'u2', 'name': 'Bob Stone', 'email': 'bstone@firm.com'},
]


@pytest.mark.unit
class TestMentions:
    """Tests for @mention resolution"""

    def test_resolves_by_name_or_email(self):
        assert extract_mentions('ping @ada and @bstone', USERS) == ['u1', 'u2']

    def test_case_insensitive_and_deduplicated(self):
        assert extract_mentions('@ADA @Ada @lovelace', USERS) == ['u1']

    def test_unknown_tokens_ignored(self):
        assert extract_mentions('cc @nobody', USERS) == []

    def test_first_matching_user_wins(self):
        assert extract_mentions('@firm', USERS) == ['u1']


@pytest.mark.unit
class TestFormatAction:
    """Tests for feed sentences"""

    def test_created(self):
        assert format_action({'action': 'created', 'actor': {'name': 'Ada'}}, 'item') == 'Ada created this item'

    def test_moved(self):
        entry = {'action': 'moved', 'actor': {'name': 'Ada'},
                 'before_data': {'stage': 'Planning'}, 'after_data': {'stage': 'Completed'}}
        assert format_action(entry, 'task') == 'Ada moved task from "Planning" to "Completed"'

    def test_status_changed(self):
        entry = {'action': 'status_changed', 'actor': {'name': 'Ada'},
                 'before_data': {'status': 'active'}, 'after_data': {'status': 'closed'}}
        assert format_action(entry, 'item') == 'Ada changed status from "active" to "closed"'

    def test_anonymous_actor(self):
        assert format_action({'action': 'commented', 'actor': None}, 'task') == 'Anonymous added a comment'

    def test_unknown_action(self):
        assert format_action({'action': 'archived', 'actor': {'name': 'Ada'}}, 'task') == \
            'Ada performed action: archived'


@pytest.mark.unit
class TestActivityLoggerFailures:
    """Tests for best-effort logging"""

    def test_failed_insert_returns_none(self):
        session = MagicMock()
        session.flush.side_effect = RuntimeError('db is gone')
        assert ActivityLogger(session, 'u1').log_create('item', 'i1') is None


@pytest.mark.integration
class TestCommentsApi:
    """Tests for /api/comments"""

    def test_comment_with_mention(self, admin_client, make_item, make_user):
        ada = make_user('staff', name='Ada Lovelace', email='ada@firm.com')
        item = make_item()

        response = admin_client.post('/api/comments', json={
            'parent_type': 'item', 'parent_id': item['id'], 'body': '  Please review @ada  '
        })
        assert response.status_code == 201
        comment = response.get_json()['comment']
        assert comment['body'] == 'Please review @ada'
        assert comment['mentions'] == [ada['id']]
        assert comment['author']['name'] == 'Admin'

    def test_comments_listed_oldest_first(self, admin_client, make_item):
        item = make_item()
        for body in ('first', 'second'):
            admin_client.post('/api/comments', json={'parent_type': 'item', 'parent_id': item['id'], 'body': body})
        comments = admin_client.get(f"/api/comments?parent_type=item&parent_id={item['id']}").get_json()['comments']
        assert [c['body'] for c in comments] == ['first', 'second']

    def test_comment_on_missing_parent(self, admin_client):
        response = admin_client.post('/api/comments', json={'parent_type': 'task', 'parent_id': 'nope', 'body': 'hi'})
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Task not found'

    def test_blank_comment_rejected(self, admin_client, make_item):
        item = make_item()
        response = admin_client.post('/api/comments', json={'parent_type': 'item', 'parent_id': item['id'], 'body': '  '})
        assert response.status_code == 400

    def test_non_text_comment_rejected(self, admin_client, make_item):
        item = make_item()
        response = admin_client.post('/api/comments', json={'parent_type': 'item', 'parent_id': item['id'], 'body': 5})
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Comment body must be text'

    def test_array_body_rejected(self, admin_client):
        response = admin_client.post('/api/comments', json=['hi'])
        assert response.status_code == 400

    def test_comment_logged_on_parent(self, admin_client, make_item):
        item = make_item()
        admin_client.post('/api/comments', json={'parent_type': 'item', 'parent_id': item['id'], 'body': 'noted'})
        feed = admin_client.get(f"/api/activity?target_type=item&target_id={item['id']}").get_json()['activity']
        assert 'Admin added a comment' in [e['message'] for e in feed]

    def test_listing_requires_parent(self, admin_client):
        assert admin_client.get('/api/comments?parent_type=item').status_code == 400


@pytest.mark.integration
class TestActivityApi:
    """Tests for /api/activity"""

    def test_requires_target(self, admin_client):
        assert admin_client.get('/api/activity?target_type=stage&target_id=x').status_code == 400

    def test_feed_is_scoped_to_target(self, admin_client, make_item):
        first = make_item(title='First')
        make_item(title='Second')
        feed = admin_client.get(f"/api/activity?target_type=item&target_id={first['id']}").get_json()['activity']
        assert len(feed) == 1
        assert feed[0]['message'] == 'Admin created this item'

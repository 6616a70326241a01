"""
Tests for calendar events and rescheduling
"""
import pytest
from services.calendar_service import build_calendar_events, task_event, item_event

ITEMS = [
    {'id': 'i1', 'title': 'Smith v. Jones', 'section_id': 'legal', 'due_date': '2025-05-01',
     'status': 'active', 'priority': 'high'},
    {'id': 'i2', 'title': 'Acme JV', 'section_id': 'deals', 'due_date': '2025-05-02',
     'status': 'Completed', 'priority': 'normal'},
    {'id': 'i3', 'title': 'No date', 'section_id': 'legal', 'due_date': None, 'status': 'active'},
]


def _task(task_id, due, item_id='i1', archived=False, status='active'):
    return {'id': task_id, 'title': task_id, 'item_id': item_id, 'due_date': due,
            'archived': archived, 'status': status, 'task_level': 0, 'parent': None}


@pytest.mark.unit
class TestCalendarEvents:
    """Tests for event building"""

    def test_item_event_is_all_day(self):
        event = item_event(ITEMS[0])
        assert event['all_day'] is True
        assert event['start'] == '2025-05-01'
        assert event['resource']['section_name'] == 'Legal Fights'

    def test_task_at_midnight_is_all_day(self):
        event = task_event(_task('t1', '2025-05-03T00:00:00'), 'legal')
        assert event['all_day'] is True
        assert event['title'] == 'Task: t1'

    def test_timed_task_lasts_one_hour(self):
        event = task_event(_task('t1', '2025-05-03T14:30:00'), 'legal')
        assert event['all_day'] is False
        assert event['end'] == '2025-05-03T15:30:00'

    def test_task_title_includes_parent(self):
        task = dict(_task('Witness A', '2025-05-03T00:00:00'), task_level=1, parent={'title': 'Depositions'})
        assert task_event(task, 'legal')['title'] == 'Task: Depositions > Witness A'

    def test_section_filter(self):
        events = build_calendar_events(ITEMS, [], sections=['deals'])
        assert [e['id'] for e in events] == ['item-i2']

    def test_hide_completed(self):
        events = build_calendar_events(ITEMS, [_task('t1', '2025-05-03T00:00:00', status='completed')],
                                       show_completed=False)
        assert [e['id'] for e in events] == ['item-i1']

    def test_archived_and_orphan_tasks_skipped(self):
        tasks = [
            _task('t1', '2025-05-03T00:00:00', archived=True),
            _task('t2', '2025-05-03T00:00:00', item_id='missing'),
            _task('t3', None),
            _task('t4', '2025-05-03T09:00:00'),
        ]
        events = build_calendar_events(ITEMS, tasks)
        assert [e['id'] for e in events if e['resource']['type'] == 'task'] == ['task-t4']


@pytest.mark.integration
class TestCalendarApi:
    """Tests for /api/calendar/*"""

    def test_events_endpoint(self, admin_client, make_item, make_task):
        item = make_item(due_date='2025-05-01')
        make_task(item['id'], due_date='2025-05-02T10:00:00')
        make_item(section_id='deals', title='Deal', due_date='2025-05-03')

        events = admin_client.get('/api/calendar/events?sections=legal').get_json()['events']
        assert sorted(e['id'] for e in events)[0].startswith('item-')
        assert len(events) == 2

    def test_unknown_section(self, admin_client):
        assert admin_client.get('/api/calendar/events?sections=sports').status_code == 400

    def test_reschedule_item(self, admin_client, make_item):
        item = make_item(due_date='2025-05-01')
        response = admin_client.post(f"/api/calendar/events/item/{item['id']}/reschedule",
                                     json={'due_date': '2025-06-15'})
        assert response.get_json()['item']['due_date'] == '2025-06-15'

        feed = admin_client.get(f"/api/activity?target_type=item&target_id={item['id']}").get_json()['activity']
        assert any(e['action'] == 'updated' and e['metadata'].get('source') == 'calendar' for e in feed)

    def test_reschedule_task(self, admin_client, make_item, make_task):
        task = make_task(make_item()['id'], due_date='2025-05-02T10:00:00')
        response = admin_client.post(f"/api/calendar/events/task/{task['id']}/reschedule",
                                     json={'due_date': '2025-05-09T11:00:00'})
        assert response.get_json()['task']['due_date'] == '2025-05-09T11:00:00'

    def test_reschedule_validation(self, admin_client, make_item):
        item = make_item()
        url = f"/api/calendar/events/item/{item['id']}/reschedule"
        assert admin_client.post(url, json={}).status_code == 400
        assert admin_client.post(url, json={'due_date': 'whenever'}).status_code == 400
        assert admin_client.post('/api/calendar/events/stage/x/reschedule', json={'due_date': '2025-01-01'}).status_code == 400
        assert admin_client.post('/api/calendar/events/item/missing/reschedule',
                                 json={'due_date': '2025-01-01'}).status_code == 404

"""
LegalFlow HTTP Client

Thin requests-based client for the JSON API. Keeps the login cookie on a
requests.Session and raises LegalFlowAPIError for any failed call, so a
KanbanBoard driven through move_on_board() reverts when the server refuses
a move.
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from services.kanban_board import KanbanBoard

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30


class LegalFlowAPIError(Exception):
    """A request failed at the transport level or the API answered success: false"""

    def __init__(self, message: str, status_code: Optional[int] = None, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.field = field


class LegalFlowClient:
    """Client for one LegalFlow server"""

    def __init__(self, base_url: str, timeout: int = DEFAULT_TIMEOUT, session: requests.Session = None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        self.user = None

    def _request(self, method: str, path: str, params: Dict = None, json: Dict = None) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, params=params, json=json, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"{method} {url} failed: {e}")
            raise LegalFlowAPIError(str(e))

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.status_code >= 400 or body.get('success') is False:
            error = body.get('error') or f"{response.status_code} {response.reason}"
            logger.warning(f"{method} {url} -> {response.status_code}: {error}")
            raise LegalFlowAPIError(error, response.status_code, body.get('field'))

        return body

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    def login(self, email: str, password: str) -> Dict:
        body = self._request('POST', '/api/auth/login', json={'email': email, 'password': password})
        self.user = body['user']
        return self.user

    def logout(self):
        self._request('POST', '/api/auth/logout')
        self.user = None

    def me(self) -> Dict:
        return self._request('GET', '/api/auth/me')['user']

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def sections(self) -> List[Dict]:
        return self._request('GET', '/api/sections')['sections']

    def stages(self, section_id: str = None) -> List[Dict]:
        params = {'section_id': section_id} if section_id else None
        return self._request('GET', '/api/stages', params=params)['stages']

    def items(self, section_id: str, **filters) -> List[Dict]:
        """Items of a section; filters are passed as query parameters"""
        params = {'section_id': section_id}
        for key, value in filters.items():
            params[key] = ','.join(value) if isinstance(value, (list, tuple)) else value
        return self._request('GET', '/api/items', params=params)['items']

    def get_item(self, item_id: str) -> Dict:
        return self._request('GET', f'/api/items/{item_id}')['item']

    def create_item(self, data: Dict) -> Dict:
        return self._request('POST', '/api/items', json=data)['item']

    def update_item(self, item_id: str, data: Dict) -> Dict:
        return self._request('PUT', f'/api/items/{item_id}', json=data)['item']

    def tasks(self, item_id: str = None, include_archived: bool = True) -> List[Dict]:
        params = {'include_archived': 'true' if include_archived else 'false'}
        if item_id:
            params['item_id'] = item_id
        return self._request('GET', '/api/tasks', params=params)['tasks']

    def create_task(self, data: Dict) -> Dict:
        return self._request('POST', '/api/tasks', json=data)['task']

    def move_task(self, task_id: str, stage: str) -> Dict:
        return self._request('POST', f'/api/kanban/tasks/{task_id}/move', json={'stage': stage})

    # ------------------------------------------------------------------
    # Kanban
    # ------------------------------------------------------------------

    def load_board(self, section_id: str, item_id: str = None, group_by: str = 'none') -> KanbanBoard:
        """
        Build a local board: the single view when item_id is given,
        otherwise the combined view of every item in the section.
        """
        if item_id:
            tasks = self.tasks(item_id=item_id)
            view_mode = 'single'
        else:
            item_ids = {item['id'] for item in self.items(section_id)}
            tasks = [t for t in self.tasks() if t.get('item_id') in item_ids]
            view_mode = 'combined'

        return KanbanBoard(tasks, self.stages(), section_id=section_id,
                           view_mode=view_mode, group_by=group_by)

    def move_on_board(self, board: KanbanBoard, task_id: str, stage: str) -> bool:
        """
        Optimistically move a task on a local board and persist it.
        The board reverts and LegalFlowAPIError propagates if the server refuses.
        """
        return board.move_task(task_id, stage, lambda task, new_stage: self.move_task(task['id'], new_stage))

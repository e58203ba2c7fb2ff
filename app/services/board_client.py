# app/services/board_client.py
import asyncio
import logging
import os
from typing import List, Optional

import requests

from app.models.task import TaskStatus
from app.services.board_sync import BoardSynchronizer, BoardTask
from app.utils.permissions import Tier

logger = logging.getLogger(__name__)

API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000")


class BoardApiError(Exception):
    def __init__(self, status_code: int, detail: str):
        super().__init__(f"{status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


class BoardApiClient:
    """Talks to the tracker API with the session cookie a login leaves behind"""

    def __init__(self, base_url: str = API_BASE_URL, session: Optional[requests.Session] = None, timeout: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def _request(self, method: str, endpoint: str, **kwargs) -> requests.Response:
        response = self.session.request(
            method,
            f"{self.base_url}{endpoint}",
            timeout=self.timeout,
            allow_redirects=False,
            **kwargs,
        )
        if response.is_redirect:
            raise BoardApiError(401, "Session expired, please log in again")
        if response.status_code >= 400:
            try:
                detail = response.json().get("detail", response.text)
            except ValueError:
                detail = response.text
            raise BoardApiError(response.status_code, str(detail))
        return response

    def login(self, username: str, password: str) -> dict:
        return self._request("POST", "/auth/login", json={"username": username, "password": password}).json()

    def logout(self) -> None:
        self._request("POST", "/auth/logout")

    def session_info(self) -> dict:
        return self._request("GET", "/auth/session").json()

    def fetch_board(self, project_id: int) -> List[BoardTask]:
        project = self._request("GET", f"/projects/{project_id}").json()
        return [BoardTask.from_dict(task) for task in project["tasks"]]

    def update_task_status(self, task_id: int, status: TaskStatus) -> dict:
        return self._request("PATCH", f"/tasks/{task_id}/status", json={"status": TaskStatus(status).value}).json()

    async def persist_status(self, task_id: int, status: TaskStatus) -> dict:
        """Non-blocking wrapper the board synchronizer persists through"""
        return await asyncio.to_thread(self.update_task_status, task_id, status)

    def open_board(self, project_id: int, on_failure=None) -> BoardSynchronizer:
        can_move_deleted = self.session_info()["tier"] == Tier.SUPER_ADMIN.value
        board = BoardSynchronizer(
            self.persist_status,
            project_id=project_id,
            on_failure=on_failure,
            can_move_deleted=can_move_deleted,
        )
        board.load(self.fetch_board(project_id))
        return board

    def reload(self, board: BoardSynchronizer) -> None:
        board.load(self.fetch_board(board.project_id))
        logger.info(f"Board {board.project_id} reconciled with {len(board.tasks)} tasks")

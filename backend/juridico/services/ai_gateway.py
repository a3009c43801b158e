"""
AI workflow gateway

Thin request/response wrapper around the two workflow-engine webhooks:

  * chat webhook  - JSON ``{process_id, action}``; the response body *is* the
                    generated text and is returned verbatim.
  * file webhook  - multipart ``process_id`` + one ``file`` part per upload,
                    fired after a process is created so the workflow can ingest
                    the documents. Best-effort.

No retries: a failed generation is reported to the caller, who may simply
ask again.
"""
from __future__ import annotations

import enum
from typing import Any, Dict, List, Optional, Tuple

import httpx

from juridico.core.config import settings
from juridico.core.logger import logger
from juridico.utils.exceptions import GenerationFailedError

# (filename, content, content_type)
FilePart = Tuple[str, bytes, str]


class GenerationAction(str, enum.Enum):
    """Actions understood by the workflow engine (wire values)."""
    create_summary = "createSummary"
    create_defense = "createDefense"
    analyze_defense = "analisarDefesa"


CHAT_ACTION = "chat"


class AIGateway:

    def __init__(
        self,
        chat_url: Optional[str] = None,
        file_url: Optional[str] = None,
        timeout: Optional[float] = None,
        file_timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.chat_url = chat_url or settings.AI_CHAT_WEBHOOK_URL
        self.file_url = file_url or settings.AI_FILE_WEBHOOK_URL
        self.timeout = timeout or settings.AI_WEBHOOK_TIMEOUT_SECONDS
        self.file_timeout = file_timeout or settings.AI_FILE_WEBHOOK_TIMEOUT_SECONDS
        self.transport = transport

    def _client(self, timeout: float) -> httpx.Client:
        return httpx.Client(timeout=timeout, transport=self.transport)

    def _post_chat(self, payload: Dict[str, Any]) -> str:
        try:
            with self._client(self.timeout) as client:
                resp = client.post(self.chat_url, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"Workflow webhook unreachable ({payload.get('action')}): {str(e)}")
            raise GenerationFailedError(reason=str(e) or e.__class__.__name__)

        if resp.status_code >= 400:
            logger.error(
                f"Workflow webhook returned {resp.status_code} for {payload.get('action')}: {resp.text[:200]}"
            )
            raise GenerationFailedError(reason=f"workflow returned HTTP {resp.status_code}")
        return resp.text

    def invoke(self, process_id: int, action: GenerationAction) -> str:
        """Run one generation action and return the text exactly as produced."""
        action = GenerationAction(action)
        logger.info(f"Invoking workflow action {action.value} for process {process_id}")
        return self._post_chat({"process_id": process_id, "action": action.value})

    def ask(self, process_id: int, session_id: int, question: str) -> str:
        """Free-form question about a process, answered by the same workflow."""
        logger.info(f"Forwarding chat question for process {process_id} (session {session_id})")
        return self._post_chat({
            "process_id": process_id,
            "action": CHAT_ACTION,
            "session_id": session_id,
            "pergunta": question,
        })

    def notify_files(self, process_id: int, files: List[FilePart]) -> bool:
        """
        Hand uploaded documents to the workflow. Failures are logged and
        reported through the return value, never raised.
        """
        if not files:
            return True
        multipart = [("file", (name, content, content_type)) for name, content, content_type in files]
        try:
            with self._client(self.file_timeout) as client:
                resp = client.post(self.file_url, data={"process_id": str(process_id)}, files=multipart)
            if resp.status_code >= 400:
                logger.warning(
                    f"File webhook returned {resp.status_code} for process {process_id}: {resp.text[:200]}"
                )
                return False
        except httpx.HTTPError as e:
            logger.warning(f"File webhook failed for process {process_id}: {str(e)}")
            return False

        logger.info(f"File webhook notified for process {process_id} ({len(files)} files)")
        return True


_ai_gateway: Optional[AIGateway] = None


def get_ai_gateway() -> AIGateway:
    global _ai_gateway
    if _ai_gateway is None:
        _ai_gateway = AIGateway()
    return _ai_gateway

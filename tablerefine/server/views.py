"""
HTTP views for server-built tables.

``TableView`` answers reloads and navigations with snapshots keyed by
table id. ``TableActionView`` is the shared action endpoint that dispatch
actions post their payload to.
"""

import json
import logging
from datetime import datetime
from typing import Any, Optional

from django.http import HttpRequest, HttpResponse, JsonResponse
from django.views import View

from ..config import get_table_settings
from ..errors import TableError, TableErrorCode, error_code_for, to_error
from .registry import table_registry
from .sanitization import validate_payload

logger = logging.getLogger(__name__)


class TableJSONMixin:
    """JSON helpers shared by the table views."""

    def json_response(self, data: dict[str, Any], status: int = 200) -> JsonResponse:
        return JsonResponse(
            {
                "timestamp": datetime.now().isoformat(),
                "status": "success" if 200 <= status < 300 else "error",
                "data": data,
            },
            status=status,
        )

    def error_response(
        self,
        code: TableErrorCode,
        message: str,
        status: int = 400,
        details: Optional[dict] = None,
    ) -> JsonResponse:
        return self.json_response(to_error(code, message, details=details), status=status)

    def parse_json_body(self, request: HttpRequest) -> Optional[Any]:
        content_type = (request.content_type or "").lower()
        if not request.body or (content_type and not content_type.startswith("application/json")):
            return None
        try:
            return json.loads(request.body.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as exc:
            logger.warning("Error parsing JSON body: %s", exc)
            return None


class TableActionView(TableJSONMixin, View):
    http_method_names = ["post", "options"]

    def options(self, request: HttpRequest, *args, **kwargs):
        return JsonResponse({}, status=200)

    def post(self, request: HttpRequest, *args, **kwargs):
        payload = self.parse_json_body(request)
        problems = validate_payload(payload)
        if problems:
            return self.error_response(
                TableErrorCode.VALIDATION,
                "Invalid action payload",
                status=400,
                details={"errors": problems},
            )

        table_id = payload["table"]
        try:
            table = table_registry.get(table_id).make(request)
            result = table.handle_action(payload)
        except TableError as exc:
            logger.info("Table action rejected: %s", exc)
            return self.error_response(error_code_for(exc), str(exc), status=exc.status)
        except Exception:
            logger.exception("Table action '%s' on '%s' failed", payload.get("name"), table_id)
            return self.error_response(
                TableErrorCode.ACTION_FAILED,
                "Action failed",
                status=500,
            )

        if isinstance(result, HttpResponse):
            return result
        data: dict[str, Any] = {
            "table": table_id,
            "action": payload["name"],
            "type": payload["type"],
        }
        if isinstance(result, dict):
            data["result"] = result
        return self.json_response(data)


class TableView(TableJSONMixin, View):
    """
    Serve one or more table snapshots keyed by table id.

    A request carrying the partial header only rebuilds the tables it
    names.
    """

    http_method_names = ["get", "options"]
    table_class = None
    table_classes: list = []

    def get_table_classes(self) -> list:
        classes = list(self.table_classes)
        if self.table_class is not None:
            classes.insert(0, self.table_class)
        return classes

    def options(self, request: HttpRequest, *args, **kwargs):
        return JsonResponse({}, status=200)

    def get(self, request: HttpRequest, *args, **kwargs):
        header = get_table_settings().partial_header
        requested = request.headers.get(header, "")
        only = {item.strip() for item in requested.split(",") if item.strip()}

        snapshots: dict[str, Any] = {}
        for table_class in self.get_table_classes():
            table_id = table_class.identifier()
            if only and table_id not in only:
                continue
            try:
                snapshots[table_id] = table_class.make(request).build(request)
            except TableError as exc:
                logger.warning("Could not build table '%s': %s", table_id, exc)
                return self.error_response(error_code_for(exc), str(exc), status=exc.status)
        return JsonResponse(snapshots)

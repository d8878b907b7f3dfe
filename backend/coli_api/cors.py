from __future__ import annotations

from starlette.datastructures import Headers
from starlette.middleware.cors import CORSMiddleware
from starlette.responses import Response
from starlette.types import Receive, Scope, Send


class LessonCORSMiddleware(CORSMiddleware):
	"""CORS allow-list that answers every OPTIONS request with 204.

	Allowed origins get the usual allow headers; anyone else gets the same
	empty 204 without ``Access-Control-Allow-Origin``.
	"""

	async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
		if scope["type"] == "http" and scope["method"] == "OPTIONS":
			headers = Headers(scope=scope)
			if "origin" not in headers or "access-control-request-method" not in headers:
				response = self._no_content(headers.get("origin"))
				await response(scope, receive, send)
				return
		await super().__call__(scope, receive, send)

	def preflight_response(self, request_headers: Headers) -> Response:
		response = super().preflight_response(request_headers=request_headers)
		headers = {k: v for k, v in response.headers.items() if k not in ("content-length", "content-type")}
		return Response(status_code=204, headers=headers)

	def _no_content(self, origin: str | None) -> Response:
		headers = dict(self.preflight_headers)
		if origin and self.is_allowed_origin(origin=origin):
			headers["Access-Control-Allow-Origin"] = origin
		return Response(status_code=204, headers=headers)

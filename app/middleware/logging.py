from fastapi import Request, Response
from fastapi.responses import JSONResponse
import time
import json
from datetime import datetime

from app.utils.logger import get_logger

logger = get_logger(__name__)


class LoggingMiddleware:
    """Middleware for request/response logging"""

    def __init__(self):
        self.logger = logger

    async def __call__(self, request: Request, call_next):
        start_time = time.time()

        self._log_request(request)

        try:
            response = await call_next(request)
            process_time = time.time() - start_time
            self._log_response(request, response, process_time)
            return response

        except Exception as e:
            process_time = time.time() - start_time
            self._log_error(request, e, process_time)
            return JSONResponse(
                status_code=500,
                content={
                    "detail": "Internal server error",
                    "timestamp": datetime.utcnow().isoformat()
                }
            )

    def _log_request(self, request: Request):
        """Log incoming request"""
        client_ip = request.client.host if request.client else "unknown"
        log_entry = {
            "type": "request",
            "timestamp": datetime.utcnow().isoformat(),
            "method": request.method,
            "url": str(request.url),
            "client_ip": client_ip,
            "user_agent": request.headers.get("user-agent", "unknown"),
        }
        self.logger.info(f"Request: {request.method} {request.url.path} from {client_ip}")
        self.logger.debug(f"Request details: {json.dumps(log_entry, indent=2)}")

    def _log_response(self, request: Request, response: Response, process_time: float):
        """Log outgoing response"""
        status_code = response.status_code
        log_entry = {
            "type": "response",
            "timestamp": datetime.utcnow().isoformat(),
            "method": request.method,
            "url": str(request.url),
            "status_code": status_code,
            "content_type": response.headers.get("content-type", "unknown"),
            "process_time": round(process_time, 4),
        }

        message = f"Response: {request.method} {request.url.path} -> {status_code} ({process_time:.4f}s)"
        if status_code >= 500:
            self.logger.error(message)
        elif status_code >= 400:
            self.logger.warning(message)
        else:
            self.logger.info(message)

        self.logger.debug(f"Response details: {json.dumps(log_entry, indent=2)}")

    def _log_error(self, request: Request, error: Exception, process_time: float):
        """Log error"""
        self.logger.error(
            f"Error: {request.method} {request.url.path} -> {type(error).__name__}: {error} ({process_time:.4f}s)",
            exc_info=error,
        )

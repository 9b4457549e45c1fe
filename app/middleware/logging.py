import json
import logging
import time
import traceback
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

class JsonFormatter(logging.Formatter):
    def format(self, record):
        log_obj = {
            'level': record.levelname,
            'logger': record.name,
            'time': self.formatTime(record, '%Y-%m-%d %H:%M:%S'),
        }
        if isinstance(record.msg, dict):
            log_obj.update(record.msg)
        else:
            log_obj['message'] = record.getMessage()
        if record.exc_info:
            log_obj['exception'] = self.formatException(record.exc_info)
        return json.dumps(log_obj, ensure_ascii=False, default=str)


logger = logging.getLogger('acquisitions.requests')
logger.setLevel(logging.INFO)
logger.propagate = False
handler = logging.StreamHandler()
handler.setFormatter(JsonFormatter())
logger.addHandler(handler)


def client_ip(request: Request) -> str:
    forwarded = request.headers.get('X-Forwarded-For', '').split(',')[0].strip()
    if request.headers.get('X-Real-IP'):
        return request.headers['X-Real-IP']
    if forwarded:
        return forwarded
    return request.client.host if request.client else ''


def request_log_data(request: Request, status_code: int, start: float, end: float) -> dict:
    # request.state.user выставляют зависимости аутентификации
    user = getattr(request.state, 'user', None)

    return {
        'http_code': status_code,
        'username': getattr(user, 'email', '') if user else '',
        'user_role': getattr(getattr(user, 'role', None), 'value', '') if user else '',
        'user_ip': client_ip(request),
        'request_method': request.method,
        'request_url': str(request.url),
        'request_path': request.url.path,
        'request_duration_ms': round((end - start) * 1000, 2),
    }


class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable):
        start = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            self.log_exception(request, e, start, time.perf_counter())
            raise

        self.log(request, response, start, time.perf_counter())
        return response

    @staticmethod
    def log(request: Request, response: Response, start: float, end: float):
        log_data = request_log_data(request, response.status_code, start, end)

        status_code = response.status_code
        if status_code >= 500:
            logger.error(msg=log_data)
        elif status_code >= 400:
            logger.warning(msg=log_data)
        else:
            logger.info(msg=log_data)

    @staticmethod
    def log_exception(request: Request, exception: Exception, start: float, end: float):
        log_data = request_log_data(request, 500, start, end)
        log_data.update({
            'exception': str(exception),
            'exception_type': type(exception).__name__,
            'traceback': traceback.format_exc(),
        })
        logger.error(msg=log_data)

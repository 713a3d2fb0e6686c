# planet_generator/worker.py

"""
================================================================================
GENERATION WORKER
================================================================================
Runs planet generation in a separate process so the interactive loop never
blocks on it. Communication is message passing only.

Protocol:
---------------
- Request:  {'type': 'createGeometry', 'data': <planet config>, 'requestId': int}
- Success:  {'type': 'geometry', 'requestId': int, 'data': <buffers>}
- Failure:  {'type': 'error', 'requestId': int | None, 'error': str}

Only one request may be outstanding. A request posted while another is still
pending is answered at once with a 'busy' error; it is not queued. A request
always runs to completion or error; there is no cancellation.

THIS FILE MUST NOT IMPORT ANY RENDERING LIBRARY.
================================================================================
"""

import collections
import logging
import multiprocessing
import os
from typing import Optional

from .mesh import PlanetConfig, generate_geometry, resolve_log_level

CREATE_GEOMETRY = 'createGeometry'
GEOMETRY = 'geometry'
ERROR = 'error'


def _error_response(request_id, text: str) -> dict:
    return {'type': ERROR, 'requestId': request_id, 'error': text}


def handle_message(message: dict) -> dict:
    """
    A top-level, pickle-able function designed to be run in a worker process.
    Every exception raised while generating is caught here, logged with its
    traceback, and turned into an error response.
    """
    worker_logger = logging.getLogger(f"Worker-{os.getpid()}")
    request_id = message.get('requestId') if isinstance(message, dict) else None

    try:
        if not isinstance(message, dict):
            raise TypeError(f"Worker messages must be mappings, got {type(message).__name__}")
        if message.get('type') != CREATE_GEOMETRY:
            raise ValueError(f"Unknown message type {message.get('type')!r}")

        data = message.get('data') or {}
        if isinstance(data, dict):
            worker_logger.setLevel(resolve_log_level(data.get('log_level')))

        planet_config = PlanetConfig.from_dict(data)
        worker_logger.info(f"WORKER: Generating planet for request {request_id}...")
        buffers, _ = generate_geometry(planet_config, logger=worker_logger)
        worker_logger.info(f"WORKER: Request {request_id} complete ({buffers.face_count} faces).")

        return {'type': GEOMETRY, 'requestId': request_id, 'data': buffers.to_message()}
    except Exception as e:
        # Use exc_info=True to log the full traceback from the worker process
        worker_logger.critical(f"WORKER: An exception occurred during generation: {e}", exc_info=True)
        return _error_response(request_id, str(e))


class GenerationWorker:
    """
    Owns a single background process. Call poll() once per frame; it returns
    the next response, or None while the request is still running.
    """
    def __init__(self, logger: logging.Logger = None):
        self.logger = logger or logging.getLogger(__name__)
        self._pool = multiprocessing.Pool(processes=1)
        self._pending = None
        self._outbox = collections.deque()
        self._next_request_id = 1

    @property
    def busy(self) -> bool:
        return self._pending is not None

    def post_message(self, message: dict) -> bool:
        """
        Submits a request without blocking. Returns False if it was rejected;
        the matching error response is then delivered by poll()/wait().
        """
        request = dict(message)
        if request.get('requestId') is None:
            request['requestId'] = self._next_request_id
            self._next_request_id += 1
        request_id = request['requestId']

        if self._pool is None:
            self._outbox.append(_error_response(request_id, "Worker is closed"))
            return False
        if self.busy:
            pending_id = self._pending[0]
            self.logger.warning(f"Rejecting request {request_id}: request {pending_id} is still running.")
            self._outbox.append(_error_response(request_id, f"Worker is busy with request {pending_id}"))
            return False

        self.logger.info(f"Submitting request {request_id} to the generation worker.")
        self._pending = (request_id, self._pool.apply_async(handle_message, (request,)))
        return True

    def poll(self) -> Optional[dict]:
        """Non-blocking. Returns the next available response or None."""
        if self._outbox:
            return self._outbox.popleft()
        if self._pending is not None and self._pending[1].ready():
            return self._collect()
        return None

    def wait(self, timeout: float = None) -> Optional[dict]:
        """Blocks until a response is available or the timeout expires."""
        if self._outbox:
            return self._outbox.popleft()
        if self._pending is None:
            return None
        self._pending[1].wait(timeout)
        if not self._pending[1].ready():
            return None
        return self._collect()

    def _collect(self) -> dict:
        request_id, result = self._pending
        self._pending = None
        try:
            response = result.get()
        except Exception as e:
            # Only reached if the worker process itself failed; generation errors come back as messages.
            self.logger.critical(f"Generation worker failed on request {request_id}: {e}", exc_info=True)
            response = _error_response(request_id, str(e))

        if response['type'] == ERROR:
            self.logger.error(f"Request {request_id} failed: {response['error']}")
        else:
            self.logger.info(f"Request {request_id} finished.")
        return response

    def close(self):
        if self._pool is not None:
            self._pool.terminate()
            self._pool.join()
            self._pool = None
        if self._pending is not None:
            # An accepted request still gets exactly one response.
            request_id = self._pending[0]
            self._pending = None
            self.logger.warning(f"Worker closed while request {request_id} was running.")
            self._outbox.append(_error_response(request_id, "Worker closed before the request completed"))

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

"""Script evaluation in a short-lived worker process.

Scripts are screened against a restricted AST before a worker is started and
screened again inside the worker. The worker sees only the bound input values,
the whitelisted helpers and a reduced set of builtins. It is terminated when
it does not answer within the timeout.
"""

import logging
import multiprocessing
from collections.abc import Mapping
from typing import Any

from vorto.domain.exceptions import MappingException
from vorto.infrastructure.sandbox.guard import SCRIPT_FUNCTION, screen
from vorto.infrastructure.sandbox.helpers import HELPERS, SAFE_BUILTINS

logger = logging.getLogger(__name__)

_READY = "ready"
_OK = "ok"
_ERROR = "error"


def _ensure_json(value: Any, where: str = "result") -> Any:
    """Copy value as plain JSON data or raise TypeError."""
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, (list, tuple)):
        return [_ensure_json(v, f"{where}[{i}]") for i, v in enumerate(value)]
    if isinstance(value, dict):
        out = {}
        for k, v in value.items():
            if not isinstance(k, str):
                raise TypeError(f"{where} has a non-string key")
            out[k] = _ensure_json(v, f"{where}.{k}")
        return out
    raise TypeError(f"{where} of type {type(value).__name__} is not JSON data")


def _run_worker(body: str, params: tuple[str, ...], bindings: dict, conn) -> None:
    """Worker process entry point."""
    try:
        code = screen(body, params)
        namespace: dict[str, Any] = {"__builtins__": dict(SAFE_BUILTINS), **HELPERS}
        exec(code, namespace)
        function = namespace[SCRIPT_FUNCTION]
    except Exception as e:
        conn.send((_ERROR, str(e)))
        conn.close()
        return

    conn.send((_READY, None))
    try:
        result = _ensure_json(function(**bindings))
    except Exception as e:
        conn.send((_ERROR, f"{type(e).__name__}: {e}"))
    else:
        conn.send((_OK, result))
    finally:
        conn.close()


class PythonScriptEvalProvider:
    """Evaluates restricted Python function bodies in a separate process."""

    def __init__(
        self,
        start_method: str = "spawn",
        startup_timeout: float = 10.0,
        kill_grace: float = 1.0,
    ) -> None:
        self._context = multiprocessing.get_context(start_method)
        self._startup_timeout = startup_timeout
        self._kill_grace = kill_grace

    def evaluate(self, body: str, bindings: Mapping[str, Any], timeout: float) -> Any:
        if timeout <= 0:
            raise MappingException("Script timeout must be positive")
        params = tuple(bindings)
        screen(body, params)
        try:
            values = _ensure_json(dict(bindings), "bindings")
        except TypeError as e:
            raise MappingException(f"Script input is not JSON data: {e}") from e

        reader, writer = self._context.Pipe(duplex=False)
        process = self._context.Process(
            target=_run_worker,
            args=(body, params, values, writer),
            name="vorto-script",
            daemon=True,
        )
        try:
            process.start()
            writer.close()
            if not reader.poll(self._startup_timeout):
                raise MappingException("Script worker did not start in time")
            kind, payload = reader.recv()
            if kind == _READY:
                if not reader.poll(timeout):
                    logger.warning("Script exceeded timeout of %ss, terminating worker", timeout)
                    raise MappingException(f"Script did not finish within {timeout}s")
                kind, payload = reader.recv()
        except (EOFError, OSError) as e:
            raise MappingException("Script worker exited without a result") from e
        finally:
            writer.close()
            reader.close()
            self._reap(process)

        if kind == _OK:
            return payload
        raise MappingException(f"Script failed: {payload}")

    def _reap(self, process) -> None:
        if process.pid is None:
            return
        if process.is_alive():
            process.terminate()
            process.join(self._kill_grace)
            if process.is_alive():
                process.kill()
        process.join()
        process.close()

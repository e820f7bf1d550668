from vorto.infrastructure.sandbox.python_sandbox import PythonScriptEvalProvider

__all__ = ["PythonScriptEvalProvider"]

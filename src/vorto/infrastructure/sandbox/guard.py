"""Static screening of mapping scripts via a restricted AST."""

import ast
import textwrap
from collections.abc import Iterable
from types import CodeType

from vorto.domain.exceptions import MappingException
from vorto.infrastructure.sandbox.helpers import ALLOWED_METHODS, HELPERS, SAFE_BUILTINS

SCRIPT_FUNCTION = "_vorto_script"

_ALLOWED_NODES = (
    ast.Return, ast.Assign, ast.AugAssign, ast.If, ast.For, ast.While,
    ast.Break, ast.Continue, ast.Pass, ast.Expr,
    ast.BoolOp, ast.BinOp, ast.UnaryOp, ast.IfExp, ast.Compare, ast.Call, ast.keyword,
    ast.Constant, ast.Name, ast.Attribute, ast.Subscript, ast.Slice,
    ast.List, ast.Tuple, ast.Dict, ast.Set,
    ast.ListComp, ast.SetComp, ast.DictComp, ast.GeneratorExp, ast.comprehension,
    ast.JoinedStr, ast.FormattedValue,
    ast.Load, ast.Store,
    ast.And, ast.Or, ast.Not, ast.USub, ast.UAdd,
    ast.Add, ast.Sub, ast.Mult, ast.Div, ast.FloorDiv, ast.Mod, ast.Pow,
    ast.BitAnd, ast.BitOr, ast.BitXor, ast.LShift, ast.RShift,
    ast.Eq, ast.NotEq, ast.Lt, ast.LtE, ast.Gt, ast.GtE,
    ast.In, ast.NotIn, ast.Is, ast.IsNot,
)


def wrap(body: str, params: Iterable[str]) -> str:
    """Wrap a function body into the script function definition."""
    text = textwrap.dedent(body).strip("\n") or "pass"
    return f"def {SCRIPT_FUNCTION}({', '.join(params)}):\n" + textwrap.indent(text, "    ")


def screen(body: str, params: Iterable[str]) -> CodeType:
    """Parse, check against the whitelist and compile. Raises MappingException."""
    params = tuple(params)
    for p in params:
        if not p.isidentifier() or p.startswith("_"):
            raise MappingException(f"Invalid script parameter [{p}]")
    source = wrap(body, params)
    try:
        tree = ast.parse(source, filename="<mapping-script>", mode="exec")
    except SyntaxError as e:
        raise MappingException(f"Script syntax error: {e.msg} (line {e.lineno})") from e

    if len(tree.body) != 1 or not isinstance(tree.body[0], ast.FunctionDef):
        raise MappingException("Script must consist of a single function body")
    function = tree.body[0]
    if function.decorator_list or function.returns:
        raise MappingException("Script must consist of a single function body")

    _check_nodes(function, set(params))
    try:
        return compile(tree, filename="<mapping-script>", mode="exec")
    except (SyntaxError, ValueError) as e:
        raise MappingException(f"Script cannot be compiled: {e}") from e


def _walk_body(function: ast.FunctionDef):
    for statement in function.body:
        yield from ast.walk(statement)


def _check_nodes(function: ast.FunctionDef, params: set[str]) -> None:
    method_calls: set[int] = set()
    local_names = set(params)
    for node in _walk_body(function):
        if isinstance(node, ast.Name) and isinstance(node.ctx, ast.Store):
            local_names.add(node.id)
        if isinstance(node, ast.Call) and isinstance(node.func, ast.Attribute):
            method_calls.add(id(node.func))

    for node in _walk_body(function):
        if isinstance(node, (ast.FunctionDef, ast.arguments, ast.arg)):
            raise MappingException("Function definitions are not allowed in mapping scripts")
        if not isinstance(node, _ALLOWED_NODES):
            raise MappingException(
                f"{type(node).__name__} is not allowed in mapping scripts"
            )
        if isinstance(node, ast.Name):
            if node.id.startswith("_"):
                raise MappingException(f"Name [{node.id}] is not allowed in mapping scripts")
            known = node.id in local_names or node.id in HELPERS or node.id in SAFE_BUILTINS
            if isinstance(node.ctx, ast.Load) and not known:
                raise MappingException(f"Name [{node.id}] is not available in mapping scripts")
        elif isinstance(node, ast.Attribute):
            if node.attr.startswith("_"):
                raise MappingException(f"Attribute [{node.attr}] is not allowed in mapping scripts")
            if id(node) not in method_calls or node.attr not in ALLOWED_METHODS:
                raise MappingException(f"Method [{node.attr}] is not available in mapping scripts")
        elif isinstance(node, ast.Call):
            if not isinstance(node.func, (ast.Name, ast.Attribute)):
                raise MappingException("Only helper functions and methods may be called")
            if isinstance(node.func, ast.Name) and node.func.id in local_names:
                raise MappingException(f"[{node.func.id}] is not callable in mapping scripts")
            for kw in node.keywords:
                if kw.arg is None:
                    raise MappingException("Keyword unpacking is not allowed in mapping scripts")
        elif isinstance(node, ast.Constant) and isinstance(node.value, bytes):
            raise MappingException("Bytes literals are not allowed in mapping scripts")

"""Meta-tool running several catalog tools in sequence.

Step parameters can reference earlier results with ``{{stepN.path.to.value}}``
templates, e.g. ``{{step0.result.id}}``. Step conditions may compare such
references, e.g. ``{{step0.result.count}} > 0``.
"""

from __future__ import annotations

import ast
import asyncio
import json
import logging
import operator
import re
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from mcp_catalog.catalog import ExecuteOptions, ToolCatalog, ToolDescriptor

from .meta import EXECUTE_TOOL_NAME, ExecuteToolTool, validate_input

logger = logging.getLogger("mcp-catalog.chain")

CHAIN_TOOL_NAME = "meta_execute_tool_chain"
DEFAULT_CHAIN_TIMEOUT = 300.0

_FULL_TEMPLATE = re.compile(r"^\{\{step(\d+)\.(.+?)\}\}$")
_INLINE_TEMPLATE = re.compile(r"\{\{step(\d+)\.(.+?)\}\}")
_FALSY_STRINGS = {"", "false", "0", "none", "null"}
_MISSING = object()

# String literals are left alone when rewriting JavaScript-style operators
_STRING_LITERAL = re.compile(r"(\"(?:[^\"\\]|\\.)*\"|'(?:[^'\\]|\\.)*')")
_JS_OPERATORS = (
    (re.compile(r"!==?"), " != "),
    (re.compile(r"===?"), " == "),
    (re.compile(r"&&"), " and "),
    (re.compile(r"\|\|"), " or "),
    (re.compile(r"!(?!=)"), " not "),
)
_NAMED_CONSTANTS = {
    "true": True,
    "false": False,
    "null": None,
    "undefined": None,
    "True": True,
    "False": False,
    "None": None,
}
_COMPARISONS: dict[type, Callable[[Any, Any], Any]] = {
    ast.Eq: operator.eq,
    ast.NotEq: operator.ne,
    ast.Lt: operator.lt,
    ast.LtE: operator.le,
    ast.Gt: operator.gt,
    ast.GtE: operator.ge,
    ast.In: lambda a, b: a in b,
    ast.NotIn: lambda a, b: a not in b,
}


class ChainStep(BaseModel):
    """A single step of a tool chain."""

    model_config = ConfigDict(populate_by_name=True)

    tool_name: str = Field(alias="toolName", min_length=1)
    parameters: dict[str, Any] = Field(default_factory=dict)
    step_name: str | None = Field(default=None, alias="stepName")
    condition: str | None = None
    continue_on_error: bool = Field(default=False, alias="continueOnError")


class ExecuteChainInput(BaseModel):
    """Input of the tool chain meta-tool."""

    model_config = ConfigDict(populate_by_name=True)

    steps: list[ChainStep] = Field(min_length=1)
    stop_on_error: bool = Field(default=True, alias="stopOnError")
    timeout: float = Field(default=DEFAULT_CHAIN_TIMEOUT, gt=0)


@dataclass
class StepResult:
    """Outcome of one chain step."""

    step_index: int
    step_name: str
    tool_name: str
    success: bool
    execution_time: float
    result: Any = None
    error: str | None = None
    skipped: bool = False

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "stepIndex": self.step_index,
            "stepName": self.step_name,
            "toolName": self.tool_name,
            "success": self.success,
            "executionTime": self.execution_time,
        }
        if self.skipped:
            data["skipped"] = True
        if self.error is not None:
            data["error"] = self.error
        else:
            data["result"] = self.result
        return data


class StepFailedError(Exception):
    """Internal signal that a failing step stops the chain."""


def _lookup(step_results: list[dict[str, Any]], index: int, path: str) -> Any:
    """Resolve ``path`` inside the result of step ``index``."""
    if index >= len(step_results):
        return _MISSING
    value: Any = step_results[index]
    for part in path.split("."):
        if isinstance(value, dict) and part in value:
            value = value[part]
        elif isinstance(value, list) and part.isdigit() and int(part) < len(value):
            value = value[int(part)]
        else:
            return _MISSING
    return value


def _to_text(value: Any) -> str:
    """Render a value for embedding in a string, JSON-encoding non-strings."""
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False, default=str)


def resolve_templates(value: Any, step_results: list[dict[str, Any]]) -> Any:
    """Substitute step references in strings, recursing into dicts and lists.

    A string consisting of a single reference is replaced by the referenced
    value itself; references embedded in longer strings are rendered as text
    (JSON for anything that is not already a string). Unresolvable references
    are left as written.
    """
    if isinstance(value, dict):
        return {key: resolve_templates(item, step_results) for key, item in value.items()}
    if isinstance(value, list):
        return [resolve_templates(item, step_results) for item in value]
    if not isinstance(value, str):
        return value

    full = _FULL_TEMPLATE.match(value)
    if full:
        found = _lookup(step_results, int(full.group(1)), full.group(2))
        return value if found is _MISSING else found

    def replace(match: re.Match[str]) -> str:
        found = _lookup(step_results, int(match.group(1)), match.group(2))
        return match.group(0) if found is _MISSING else _to_text(found)

    return _INLINE_TEMPLATE.sub(replace, value)


def is_truthy(value: Any) -> bool:
    """Interpret a resolved condition value."""
    if isinstance(value, str):
        return value.strip().lower() not in _FALSY_STRINGS
    return bool(value)


def _normalize_operators(expression: str) -> str:
    """Rewrite ``===``, ``!==``, ``&&``, ``||`` and ``!`` outside string literals."""
    parts = _STRING_LITERAL.split(expression)
    for i in range(0, len(parts), 2):
        for pattern, replacement in _JS_OPERATORS:
            parts[i] = pattern.sub(replacement, parts[i])
    return "".join(parts)


def _evaluate_node(node: ast.AST) -> Any:
    """Evaluate a literal comparison expression, rejecting anything else."""
    if isinstance(node, ast.Expression):
        return _evaluate_node(node.body)
    if isinstance(node, ast.Constant):
        return node.value
    if isinstance(node, ast.Name) and node.id in _NAMED_CONSTANTS:
        return _NAMED_CONSTANTS[node.id]
    if isinstance(node, (ast.List, ast.Tuple)):
        return [_evaluate_node(item) for item in node.elts]
    if isinstance(node, ast.Dict) and None not in node.keys:
        return {
            _evaluate_node(key): _evaluate_node(item)
            for key, item in zip(node.keys, node.values)
        }
    if isinstance(node, ast.UnaryOp):
        operand = _evaluate_node(node.operand)
        if isinstance(node.op, ast.Not):
            return not is_truthy(operand)
        if isinstance(node.op, ast.USub):
            return -operand
        if isinstance(node.op, ast.UAdd):
            return +operand
    if isinstance(node, ast.BoolOp):
        if isinstance(node.op, ast.And):
            return all(is_truthy(_evaluate_node(item)) for item in node.values)
        return any(is_truthy(_evaluate_node(item)) for item in node.values)
    if isinstance(node, ast.Compare):
        left = _evaluate_node(node.left)
        for op, comparator in zip(node.ops, node.comparators):
            compare = _COMPARISONS.get(type(op))
            if compare is None:
                raise ValueError(f"Unsupported operator {type(op).__name__}")
            right = _evaluate_node(comparator)
            if not compare(left, right):
                return False
            left = right
        return True
    raise ValueError(f"Unsupported expression element {type(node).__name__}")


def evaluate_condition(condition: str, step_results: list[dict[str, Any]]) -> bool:
    """Decide whether a step with ``condition`` should run.

    A condition made of a single reference is judged by :func:`is_truthy`.
    Otherwise references are replaced by JSON literals (``null`` when
    unresolved) and the result is evaluated as a comparison expression with
    ``== != < <= > >= in``, ``and``/``or``/``not`` and their JavaScript
    spellings. A condition that cannot be evaluated is logged and treated as
    false.

    Examples:
        >>> evaluate_condition("{{step0.result.count}} > 0", [{"result": {"count": 0}}])
        False
        >>> evaluate_condition("{{step0.success}} && {{step0.result.count}} >= 1",
        ...                    [{"success": True, "result": {"count": 2}}])
        True
    """
    full = _FULL_TEMPLATE.match(condition.strip())
    if full:
        found = _lookup(step_results, int(full.group(1)), full.group(2))
        return is_truthy(None if found is _MISSING else found)

    def replace(match: re.Match[str]) -> str:
        found = _lookup(step_results, int(match.group(1)), match.group(2))
        return json.dumps(None if found is _MISSING else found, default=str)

    expression = _normalize_operators(_INLINE_TEMPLATE.sub(replace, condition))
    try:
        tree = ast.parse(expression.strip(), mode="eval")
        return is_truthy(_evaluate_node(tree))
    except (SyntaxError, ValueError, TypeError, RecursionError) as e:
        logger.warning(f"Failed to evaluate condition {condition!r}: {e}")
        return False


class ExecuteToolChainTool:
    """Meta-tool executing a sequence of catalog tools.

    The chain gives up waiting once ``timeout`` seconds have passed. The step
    in flight is not cancelled; its result is discarded and no later step is
    started.
    """

    def __init__(self, catalog: ToolCatalog) -> None:
        self._executor = ExecuteToolTool(catalog)
        self._descriptor = ToolDescriptor(
            name=CHAIN_TOOL_NAME,
            description=(
                "Execute several tools in sequence. Step parameters may reference "
                "earlier results with {{stepN.path.to.value}}, e.g. "
                "{{step0.result.id}}. Use this after finding tools with "
                f"meta_search_tools; for a single call use {EXECUTE_TOOL_NAME}."
            ),
            parameters={
                "type": "object",
                "properties": {
                    "steps": {
                        "type": "array",
                        "description": "Tool execution steps, run in order",
                        "items": {
                            "type": "object",
                            "properties": {
                                "toolName": {
                                    "type": "string",
                                    "description": "Name of the tool to execute",
                                },
                                "parameters": {
                                    "type": "object",
                                    "description": (
                                        "Parameters for the tool. Use "
                                        "{{stepN.path.to.value}} to reference "
                                        "previous results"
                                    ),
                                },
                                "stepName": {
                                    "type": "string",
                                    "description": "Optional custom name for this step",
                                },
                                "condition": {
                                    "type": "string",
                                    "description": (
                                        "Optional condition such as "
                                        "{{step0.success}} or "
                                        "{{step0.result.count}} > 0; the step is "
                                        "skipped when it evaluates to false"
                                    ),
                                },
                                "continueOnError": {
                                    "type": "boolean",
                                    "description": "Continue the chain if this step fails",
                                    "default": False,
                                },
                            },
                            "required": ["toolName", "parameters"],
                        },
                    },
                    "stopOnError": {
                        "type": "boolean",
                        "description": "Stop at the first failing step (default: true)",
                        "default": True,
                    },
                    "timeout": {
                        "type": "number",
                        "description": "Maximum chain duration in seconds (default: 300)",
                        "default": DEFAULT_CHAIN_TIMEOUT,
                    },
                },
                "required": ["steps"],
            },
        )

    @property
    def descriptor(self) -> ToolDescriptor:
        return self._descriptor

    @property
    def name(self) -> str:
        return self._descriptor.name

    @property
    def description(self) -> str:
        return self._descriptor.description

    @property
    def parameters(self) -> dict[str, Any]:
        return self._descriptor.parameters

    async def execute(
        self, params: dict[str, Any] | str | None = None, options: ExecuteOptions | None = None
    ) -> dict[str, Any]:
        """Run the chain.

        Args:
            params: ``{steps, stopOnError?, timeout?}`` as a dict or JSON string
            options: Forwarded to every step

        Returns:
            ``{success, stepResults, executionTime, error?}``

        Raises:
            InvalidInputError: If the input is malformed or has no steps
        """
        request = validate_input(ExecuteChainInput, params, self.name)
        start = time.monotonic()
        step_results: list[StepResult] = []
        stopped = asyncio.Event()

        task = asyncio.ensure_future(
            self._run_steps(request, step_results, options, stopped)
        )
        task.add_done_callback(_log_orphan_failure)
        done, _ = await asyncio.wait({task}, timeout=request.timeout)

        error: str | None = None
        if not done:
            stopped.set()
            error = f"Tool chain execution timed out after {request.timeout}s"
            logger.warning(error)
        elif task.exception() is not None:
            error = str(task.exception())

        results = [result.to_dict() for result in step_results]
        response: dict[str, Any] = {
            "success": error is None
            and all(r.success or r.skipped for r in step_results),
            "stepResults": results,
            "executionTime": time.monotonic() - start,
        }
        if error is not None:
            response["error"] = error
        return response

    async def _run_steps(
        self,
        request: ExecuteChainInput,
        step_results: list[StepResult],
        options: ExecuteOptions | None,
        stopped: asyncio.Event,
    ) -> None:
        for index, step in enumerate(request.steps):
            if stopped.is_set():
                logger.info(
                    f"Tool chain stopped before step {index} ({step.tool_name})"
                )
                return
            step_name = step.step_name or step.tool_name
            step_start = time.monotonic()
            resolved = [result.to_dict() for result in step_results]

            if step.condition is not None and not evaluate_condition(
                step.condition, resolved
            ):
                logger.debug(f"Skipping step {index} ({step_name}): condition is false")
                step_results.append(
                    StepResult(
                        step_index=index,
                        step_name=step_name,
                        tool_name=step.tool_name,
                        success=True,
                        skipped=True,
                        execution_time=time.monotonic() - step_start,
                    )
                )
                continue

            parameters = resolve_templates(step.parameters, resolved)
            try:
                result = await self._executor.execute(
                    {"toolName": step.tool_name, "params": parameters}, options
                )
            except Exception as e:
                step_results.append(
                    StepResult(
                        step_index=index,
                        step_name=step_name,
                        tool_name=step.tool_name,
                        success=False,
                        error=str(e),
                        execution_time=time.monotonic() - step_start,
                    )
                )
                if request.stop_on_error and not step.continue_on_error:
                    raise StepFailedError(
                        f"Step {index} ({step_name}) failed: {e}"
                    ) from e
                continue

            step_results.append(
                StepResult(
                    step_index=index,
                    step_name=step_name,
                    tool_name=step.tool_name,
                    success=True,
                    result=result,
                    execution_time=time.monotonic() - step_start,
                )
            )


def _log_orphan_failure(task: asyncio.Future) -> None:
    """Retrieve the chain task's outcome so late failures are logged once."""
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None and not isinstance(exc, StepFailedError):
        logger.error(f"Tool chain task failed: {exc}")

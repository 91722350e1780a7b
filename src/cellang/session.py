"""Line-oriented front end: feeds lines through tokenize, parse and evaluate.

A ``Session`` owns one ``CellContext`` and the token list of the statement
in progress.  Lines are fed one at a time; while a bracket is open the
session asks for more input instead of evaluating.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from enum import Enum
from typing import IO, Any, Iterable

from cellang.config import DEFAULT_CONFIG
from cellang.context import CellContext
from cellang.formulas.errors import EvalError
from cellang.formulas.evaluator import evaluate
from cellang.formulas.expressions import Expression, render
from cellang.formulas.parser import parse
from cellang.formulas.tokenizer import TokenizerResult, scope_level, tokenize
from cellang.formulas.tokens import Token
from cellang.formulas.values import is_range, to_text
from cellang.logging.events import (
    EVAL_ERROR,
    LEX_ERROR,
    PARSE_ERROR,
    EventType,
    emit_error,
    emit_info,
    statement_context,
)


class StatementStatus(str, Enum):
    OK = "ok"
    NEEDS_MORE = "needs_more"
    ERROR = "error"


@dataclass(frozen=True)
class StatementResult:
    status: StatementStatus
    value: Any = None
    error: str | None = None
    expression: Expression | None = None


def display(value: Any) -> str:
    """Text shown for a statement result."""
    if is_range(value):
        return ", ".join(f"${address}={to_text(v)}" for address, v in value.items())
    if isinstance(value, str):
        return value
    return to_text(value)


class Session:
    """One evaluation session.

    Args:
        context: Context to evaluate against; a new one is created when omitted
            and closed with the session.
        config: Merged configuration (see ``cellang.config``).
    """

    def __init__(
        self,
        context: CellContext | None = None,
        config: dict[str, Any] | None = None,
    ) -> None:
        self.config = {**DEFAULT_CONFIG, **(config or {})}
        self._owns_context = context is None
        self.context = context if context is not None else CellContext()
        self.session_id = uuid.uuid4().hex[:12]
        self.tokens: list[Token] = []
        self.line_number = 0
        self._source: list[str] = []
        self._needs_more = False
        self.statements = 0
        self.errors = 0
        emit_info(
            EventType.session_started,
            "session started",
            {"session_id": self.session_id},
            session_id=self.session_id,
        )

    @property
    def needs_more(self) -> bool:
        """True while the statement in progress has an unclosed bracket."""
        return self._needs_more

    @property
    def depth(self) -> int:
        return scope_level(self.tokens)

    def feed(self, line: str) -> StatementResult:
        """Feed one line of input and evaluate the statement once it is complete."""
        self.line_number += 1
        if not self._needs_more:
            self.tokens.clear()
            self._source.clear()
        self._source.append(line)
        self._needs_more = False

        result, error = tokenize(line, self.tokens)
        if result is TokenizerResult.NEEDS_MORE:
            self._needs_more = True
            return StatementResult(StatementStatus.NEEDS_MORE)
        if result is TokenizerResult.ERROR:
            return self._fail(error, LEX_ERROR)

        expression, error = parse(self.tokens)
        self.tokens.clear()
        if error is not None:
            return self._fail(error, PARSE_ERROR)
        if expression is None:
            return StatementResult(StatementStatus.OK)

        value, error = evaluate(expression, self.context)
        if error is not None:
            return self._fail(error, EVAL_ERROR, expression)

        self.statements += 1
        try:
            extra = {"inspect": render(expression)}
        except EvalError as exc:
            extra = {"inspect_error": exc.message}
        emit_info(
            EventType.statement_evaluated,
            "statement evaluated",
            self._statement_context(extra),
            session_id=self.session_id,
        )
        return StatementResult(StatementStatus.OK, value=value, expression=expression)

    def finish(self) -> StatementResult | None:
        """Report a statement left open at end of input, if any."""
        if not self._needs_more:
            return None
        depth = self.depth
        self._needs_more = False
        self.tokens.clear()
        return self._fail(f"Unexpected end of input: {depth} unclosed '('.", LEX_ERROR)

    def _statement_context(self, extra: dict[str, Any] | None = None) -> dict[str, Any]:
        return statement_context(
            session_id=self.session_id,
            line_number=self.line_number,
            source="\n".join(self._source),
            extra=extra,
        )

    def _fail(
        self, error: str | None, code: str, expression: Expression | None = None
    ) -> StatementResult:
        self.tokens.clear()
        self.errors += 1
        message = error or "Unknown error."
        emit_error(
            EventType.statement_failed,
            message,
            self._statement_context(),
            error_code=code,
            session_id=self.session_id,
        )
        return StatementResult(StatementStatus.ERROR, error=message, expression=expression)

    def run(
        self,
        lines: Iterable[str],
        out: IO[str],
        err: IO[str],
        *,
        interactive: bool = False,
    ) -> int:
        """Drive the session over *lines* and return a process exit code.

        In interactive mode prompts are written to *out* and errors never
        stop the loop.  Otherwise the first error returns 1 when
        ``stop_on_error`` is set.
        """
        stop = not interactive and bool(self.config["stop_on_error"])
        echo = bool(self.config["echo_results"])
        exit_code = 0

        def prompt() -> None:
            if interactive:
                out.write(
                    self.config["continuation_prompt"] if self._needs_more else self.config["prompt"]
                )
                out.flush()

        prompt()
        for raw in lines:
            result = self.feed(raw.rstrip("\r\n"))
            if result.status is StatementStatus.ERROR:
                err.write(f"error: {result.error}\n")
                exit_code = 1
                if stop:
                    return exit_code
            elif result.status is StatementStatus.OK and echo and result.value is not None:
                out.write(display(result.value) + "\n")
            prompt()

        leftover = self.finish()
        if leftover is not None:
            err.write(f"error: {leftover.error}\n")
            exit_code = 1
        if interactive:
            out.write("\n")
            return 0
        return exit_code

    def close(self) -> None:
        emit_info(
            EventType.session_completed,
            "session completed",
            {
                "session_id": self.session_id,
                "statements": self.statements,
                "errors": self.errors,
            },
            session_id=self.session_id,
        )
        if self._owns_context:
            self.context.close()

    def __enter__(self) -> Session:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

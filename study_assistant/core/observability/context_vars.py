from contextvars import ContextVar

from structlog.contextvars import bind_contextvars

learner_id_ctx: ContextVar[str | None] = ContextVar("learner_id", default=None)


def get_learner_id() -> str | None:
    return learner_id_ctx.get()


def bind_context(**kwargs):
    """
    Binds the provided key-value pairs to the current structlog context.
    """
    bind_contextvars(**kwargs)

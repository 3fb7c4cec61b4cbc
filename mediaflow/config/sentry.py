import sentry_sdk

from mediaflow.lib.cor import Context
from mediaflow.settings import MediaflowSettings


def init_sentry(settings: MediaflowSettings) -> bool:
    """Initialize Sentry for error tracking.

    Returns:
        True if Sentry was initialized, False when no DSN is configured.
    """
    if not settings.sentry_dsn:
        return False
    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        send_default_pii=False,
    )
    return True


def report_errors(ctx: Context) -> None:
    """Send every error accumulated in the context to Sentry, tagged by command."""
    for command_name, errors in ctx.errors.items():
        for error in errors:
            with sentry_sdk.new_scope() as scope:
                scope.set_tag("command", command_name)
                sentry_sdk.capture_exception(error)

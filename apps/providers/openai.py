"""OpenAI status page provider."""

from django.conf import settings

from apps.providers.statuspage import GenericStatuspageProvider


class OpenAIStatusProvider(GenericStatuspageProvider):
    """
    Provider for the OpenAI status page.

    Connection details default to the OPENAI_* settings; any of them can be
    overridden through constructor arguments (e.g. from STATUS_PROVIDERS).
    """

    def __init__(
        self,
        base_url: str | None = None,
        page_id: str | None = None,
        webhook_path: str | None = None,
        webhook_secret: str | None = None,
        timeout: int | None = None,
    ):
        super().__init__(
            name="openai",
            base_url=base_url or getattr(settings, "OPENAI_STATUS_BASE_URL", ""),
            page_id=page_id or getattr(settings, "OPENAI_STATUS_PAGE_ID", ""),
            webhook_path=webhook_path or getattr(settings, "OPENAI_WEBHOOK_PATH", ""),
            webhook_secret=webhook_secret or getattr(settings, "OPENAI_WEBHOOK_SECRET", ""),
            timeout=timeout,
        )

"""Template rendering for the digest email using Jinja2.

Wraps Jinja2 with strict undefined checking so a template referencing a
missing variable fails loudly instead of sending a half-empty email.
"""

from typing import Any, Dict

from jinja2 import Environment, PackageLoader, StrictUndefined, TemplateError, select_autoescape

from jobwatch.logging import get_logger

from .models import NotificationTemplateError

logger = get_logger(__name__, component="notification")


class TemplateRenderer:
    """Renders the digest subject and plain-text body.

    Templates live in the ``jobwatch.notifications/templates`` package
    directory and are cached by Jinja2 after first load.
    """

    def __init__(
        self,
        template_dir: str = "templates",
        subject_template: str = "digest_subject.j2",
        text_template: str = "digest_body.txt.j2",
    ):
        self.subject_template_name = subject_template
        self.text_template_name = text_template

        self.env = Environment(
            loader=PackageLoader("jobwatch.notifications", template_dir),
            autoescape=select_autoescape(enabled_extensions=("html", "htm")),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )

    def render(self, context: Dict[str, Any]) -> Dict[str, str]:
        """Render the digest.

        Returns:
            Dictionary with ``subject`` (single line) and ``text_body``

        Raises:
            NotificationTemplateError: If template rendering fails
        """
        try:
            subject_template = self.env.get_template(self.subject_template_name)
            text_template = self.env.get_template(self.text_template_name)

            subject = " ".join(subject_template.render(context).split())
            text_body = text_template.render(context)
        except TemplateError as e:
            error_msg = f"Template rendering failed: {e}"
            logger.error(error_msg, exc_info=True, extra={"event": "digest.render.failed"})
            raise NotificationTemplateError(error_msg) from e

        return {"subject": subject, "text_body": text_body}

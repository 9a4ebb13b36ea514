"""
Renderer entry point.

``render`` is pure: it reads the store and returns text. A failed call
(for example an unsupported format) has no effect on the store.
"""
import logging
from typing import Any, Dict, Optional, Union

from ..core.factory import get_formatter_factory
from ..core.models import DEFAULT_EXTERNAL_PREFIX, RenderFormat
from ..glossary.term_store import TermStore
from ..utils.config_manager import RenderConfig


logger = logging.getLogger(__name__)


def formatter_options(
    config: Optional[RenderConfig] = None,
    external_prefix: str = DEFAULT_EXTERNAL_PREFIX
) -> Dict[str, Any]:
    config = config or RenderConfig()
    return {
        'bold_marker': config.bold_marker,
        'italic_marker': config.italic_marker,
        'show_related': config.show_related,
        'show_asides': config.show_asides,
        'external_prefix': external_prefix,
    }


def render(
    store: TermStore,
    render_format: Union[RenderFormat, str] = RenderFormat.PLAIN,
    config: Optional[RenderConfig] = None,
    external_prefix: str = DEFAULT_EXTERNAL_PREFIX
) -> str:
    """
    Render ``store`` in the requested format.

    Args:
        store: Term store to render
        render_format: ``plain`` or ``emphasized``
        config: Marker and visibility options
        external_prefix: Prefix written before external references

    Returns:
        Rendered text, terms in insertion order

    Raises:
        UnsupportedFormatError: If ``render_format`` is not recognized
    """
    formatter = get_formatter_factory().get_formatter(
        render_format, **formatter_options(config, external_prefix)
    )
    output = formatter.format(store)
    logger.info(
        f"Rendered {len(store)} terms as {formatter.render_format.value} ({len(output)} chars)"
    )
    return output

"""Views serving treemap report visualizations."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from django.conf import settings
from django.http import Http404, HttpRequest, HttpResponse, JsonResponse
from django.shortcuts import render
from django.utils import timezone

from reports.forms import TreemapRequestForm
from reports.loaders import ReportDefinition, UnknownReportError, get_report_loader
from visualization.adapter import TreemapVisualization
from visualization.config import (
    FOOTER_ICON_TITLE,
    TEMPLATE_NAME,
    VISUALIZATION_ID,
    TreemapConfig,
    configure_visualization,
)
from visualization.errors import VisualizationError
from visualization.generator import TreemapNode

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TreemapResult:
    """Outcome of running the treemap pipeline for one request."""

    definition: ReportDefinition
    config: TreemapConfig
    custom_parameters: dict[str, str]
    has_data: bool
    tree: TreemapNode | None

    def as_json(self) -> dict[str, Any]:
        return {
            "report": self.definition.id,
            "visualization": VISUALIZATION_ID,
            "properties": self.config.client_side_properties(),
            "custom_parameters": self.custom_parameters,
            "has_data": self.has_data,
            "tree": self.tree,
        }


def _build_treemap(form: TreemapRequestForm) -> TreemapResult:
    """Run configuration, request adaptation, loading and tree generation.

    Raises:
        Http404: When the requested report is unknown.
        VisualizationError: When the request cannot be visualized.
    """

    request = form.report_request()
    loader = get_report_loader()
    try:
        definition = loader.definition(request.report)
    except UnknownReportError as exc:
        raise Http404(str(exc)) from exc

    show_evolution = form.show_evolution_override()
    if show_evolution is None:
        show_evolution = settings.TREEMAP_SHOW_EVOLUTION_VALUES

    config = configure_visualization(
        columns_to_display=definition.columns,
        translations=definition.translations,
        show_evolution_values=show_evolution,
        filter_offset=request.filter_offset,
        subtable_controller_action=(
            form.cleaned_data.get("subtable_controller_action") or definition.subtable_controller_action
        ),
    )
    today = timezone.localdate()
    visualization = TreemapVisualization(config, today=today)
    adapted = visualization.before_load_data_table(request)
    data = loader.load(adapted, today=today)
    adapted = visualization.before_generic_filters(adapted)

    has_data = visualization.is_there_data_to_display(data)
    tree = visualization.generate(data) if has_data else None
    return TreemapResult(
        definition=definition,
        config=config,
        custom_parameters=dict(adapted.custom_parameters),
        has_data=has_data,
        tree=tree,
    )


def treemap_data(request: HttpRequest) -> JsonResponse:
    """Return the treemap node tree and client-side properties as JSON."""

    form = TreemapRequestForm(request.GET)
    if not form.is_valid():
        return JsonResponse({"errors": form.errors.get_json_data()}, status=400)

    try:
        result = _build_treemap(form)
    except VisualizationError as exc:
        logger.warning("Rejected treemap request %s: %s", request.GET.urlencode(), exc)
        return JsonResponse({"errors": {"__all__": [{"message": str(exc), "code": "invalid"}]}}, status=400)
    return JsonResponse(result.as_json())


def treemap(request: HttpRequest) -> HttpResponse:
    """Render the treemap page for a report."""

    form = TreemapRequestForm(request.GET)
    if not form.is_valid():
        return render(request, TEMPLATE_NAME, {"form": form, "error": None, "result": None}, status=400)

    try:
        result = _build_treemap(form)
    except VisualizationError as exc:
        logger.warning("Rejected treemap request %s: %s", request.GET.urlencode(), exc)
        return render(request, TEMPLATE_NAME, {"form": form, "error": str(exc), "result": None}, status=400)

    return render(
        request,
        TEMPLATE_NAME,
        {
            "form": form,
            "error": None,
            "result": result,
            "payload": result.as_json(),
            "datatable_js_type": result.config.datatable_js_type,
            "footer_icon_title": FOOTER_ICON_TITLE,
        },
    )

"""Forms for treemap report requests."""

from __future__ import annotations

from django import forms

from visualization.periods import PERIODS
from visualization.request import ReportRequest


class TreemapRequestForm(forms.Form):
    """Validate query parameters for the treemap views.

    `period` and `date` are deliberately optional here: their presence and
    format depend on whether evolution values apply, which the visualization
    layer decides.
    """

    report = forms.CharField(max_length=100)
    period = forms.ChoiceField(
        required=False,
        choices=[("", "---------")] + [(name, name.title()) for name in PERIODS],
    )
    date = forms.CharField(required=False, max_length=64)
    filter_offset = forms.IntegerField(required=False, min_value=0)
    availableWidth = forms.IntegerField(required=False, min_value=1)
    availableHeight = forms.IntegerField(required=False, min_value=1)
    show_evolution_values = forms.NullBooleanField(required=False)
    subtable_controller_action = forms.CharField(required=False, max_length=100)

    def report_request(self) -> ReportRequest:
        """Return the ReportRequest described by the validated form.

        Raises:
            ValueError: If the form is invalid.
        """

        if not self.is_valid():
            raise ValueError("TreemapRequestForm must be valid before building a ReportRequest.")

        data = self.cleaned_data
        return ReportRequest(
            report=data["report"],
            period=(data.get("period") or None),
            date=((data.get("date") or "").strip() or None),
            filter_offset=data.get("filter_offset") or 0,
            available_width=data.get("availableWidth"),
            available_height=data.get("availableHeight"),
        )

    def show_evolution_override(self) -> bool | None:
        """Return the explicit `show_evolution_values` choice, if any."""

        return self.cleaned_data.get("show_evolution_values")

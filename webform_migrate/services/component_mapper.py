"""Mapping of legacy webform components to target webform elements."""

import logging
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Optional

from ..models.legacy import LegacyComponent, LegacyConditional, LegacyForm
from .serialized import flag
from .tokens import (
    ADD_TO_SCHEDULE_URL,
    CURRENT_USER_MAIL,
    query_token,
    replace_user_tokens,
)

logger = logging.getLogger(__name__)

# Joiner placed between the value clauses of a '#states' condition.
STATE_JOINER = "or"

# Tracking fields whose default is read from the page query string.
QUERY_STRING_KEYS = ("utm_campaign", "utm_content", "utm_medium", "utm_source")

# utm_term always carried this campaign id on the legacy site.
LEGACY_CAMPAIGN_ID = "7010B000000sC3p"

PRIVACY_POLICY_ERROR = "Privacy policy field is required."

# Fields rendered as selects over a predefined options list on the target.
SELECT_KEYS = ("designation", "job_title")
PREDEFINED_OPTIONS = {
    "gdpr_country": "country_codes",
    "designation": "designation",
    "job_title": "designation",
}

NEVER_REQUIRED_KEYS = ("organization",)

# Synthetic components added to every form.
ACTIONS_CID = 1000
ADD_TO_SCHEDULE_CID = 1001
DISCLAIMER_KEY = "disclaimer_markup"


def rewrite_type(component: LegacyComponent) -> str:
    """
    Work out the target element type of a legacy component.

    Markup becomes processed text; a select that is not rendered as a list
    becomes radios, checkboxes, or a single checkbox; designation/job title
    fields are always selects.
    """
    new_type = component.type

    if new_type == "markup":
        new_type = "processed_text"

    if new_type == "select" and flag(component.extra.get("aslist")) == 0:
        if flag(component.extra.get("multiple")) == 1:
            # No items at all still renders as a single checkbox.
            new_type = "checkbox" if len(component.options()) <= 1 else "checkboxes"
        else:
            new_type = "radios"

    if component.form_key in SELECT_KEYS:
        new_type = "select"

    return new_type


def normalize_component(component: LegacyComponent) -> LegacyComponent:
    """Return a copy of the component with its target type and required flag."""
    required = component.required
    if component.form_key in NEVER_REQUIRED_KEYS:
        required = False
    return replace(component, type=rewrite_type(component), required=required)


def with_synthetic_components(
    form: LegacyForm,
    components: Iterable[LegacyComponent]
) -> List[LegacyComponent]:
    """
    Append the elements every migrated form gets.

    The submit button carries the form's submit text, a disclaimer markup
    component is moved below it, and an 'add to schedule' link closes the form.
    """
    result = list(components)

    result.append(LegacyComponent(
        cid=ACTIONS_CID,
        form_key="actions",
        name="Submit button(s)",
        type="webform_actions",
        value=form.submit_text or "",
        nid=form.nid,
    ))

    disclaimer = next((c for c in result if c.form_key == DISCLAIMER_KEY), None)
    if disclaimer is not None:
        result.remove(disclaimer)
        result.append(disclaimer)

    result.append(LegacyComponent(
        cid=ADD_TO_SCHEDULE_CID,
        form_key="add_to_schedule",
        name="Add to schedule",
        type="attachment_url",
        nid=form.nid,
    ))

    return result


def build_visible_states(
    conditional: Optional[LegacyConditional],
    siblings: Dict[int, LegacyComponent]
) -> List[Any]:
    """
    Translate a legacy conditional into a target '#states' condition list.

    Each option of the referenced component whose key is a trigger value
    yields one clause; clauses are separated by STATE_JOINER. Returns an
    empty list when the referenced component was not read for this form.
    """
    if conditional is None:
        return []

    source = siblings.get(conditional.cid)
    if source is None:
        logger.debug(f"Conditional component {conditional.cid} not found, no visibility rule")
        return []

    if conditional.operator not in ("=", ""):
        logger.debug(f"Conditional operator {conditional.operator!r} treated as equality")

    selector = f':input[name="{source.form_key}"]'
    states: List[Any] = []
    for key, label in source.options().items():
        if key in conditional.values:
            if states:
                states.append(STATE_JOINER)
            states.append({selector: {"value": label}})
    return states


class ComponentMapper:
    """
    Builds target elements for the components of one legacy form.

    Components are expected in the order the legacy form shows them; the
    full list is kept so conditionals can look up the component they refer to.
    """

    def __init__(self, form: LegacyForm, components: Iterable[LegacyComponent]):
        """
        Initialize the mapper.

        Args:
            form: The legacy form the components belong to
            components: All components read for the form
        """
        self.form = form
        self.components = list(components)
        self._by_cid = {c.cid: c for c in self.components}

    def create_element(self, component: LegacyComponent) -> Dict[str, Any]:
        """
        Create a target element from a legacy component.

        Args:
            component: Legacy component; its type is rewritten first

        Returns:
            Element properties keyed '#title', '#type', ...
        """
        component = normalize_component(component)
        element: Dict[str, Any] = {
            "#title": component.name,
            "#type": component.type,
            "#required": bool(component.required),
            "#default_value": "",
            "#title_display": "invisible",
        }

        visible = build_visible_states(component.conditional, self._by_cid)
        if visible:
            element["#states"] = {"visible": visible}

        if component.value and component.type != "processed_text":
            element["#default_value"] = replace_user_tokens(component.value)

        self._shape_by_type(component, element)
        self._apply_form_key_overrides(component, element)
        self.extra_info(component, element)

        if component.form_key in PREDEFINED_OPTIONS:
            element["#options"] = PREDEFINED_OPTIONS[component.form_key]

        return element

    def _shape_by_type(self, component: LegacyComponent, element: Dict[str, Any]) -> None:
        name = component.name
        options = component.options()

        if component.type == "email":
            element["#default_value"] = CURRENT_USER_MAIL
            element["#placeholder"] = f"{name}*"
        elif component.type == "textfield":
            element["#placeholder"] = f"{name}*" if component.required else name
        elif component.type == "select":
            element["#empty_option"] = name
        elif component.type == "processed_text":
            element["#format"] = "full_html"
            element["#text"] = component.value
        elif component.type == "checkboxes":
            element["#options"] = options
            element["#description"] = name
            element["#description_display"] = "invisible"
            del element["#title_display"]
        elif component.type == "checkbox":
            # The single option's label is what the user reads next to the box.
            label = next(iter(options.values())) if len(options) == 1 else name
            element["#description"] = label
            element["#description_display"] = "invisible"
            element["#title_display"] = "after"
        elif component.type == "radios":
            element["#description"] = name
            element["#description_display"] = "invisible"
            element["#options"] = options
            element["#title_display"] = "before"

    def _apply_form_key_overrides(self, component: LegacyComponent, element: Dict[str, Any]) -> None:
        key = component.form_key

        if key in QUERY_STRING_KEYS:
            element["#default_value"] = query_token(key)
        elif key == "utm_term":
            element["#default_value"] = LEGACY_CAMPAIGN_ID
        elif key == "privacy_policy":
            element["#required_error"] = PRIVACY_POLICY_ERROR
        elif key == "actions":
            if component.value:
                element["#submit__label"] = component.value
        elif key == "add_to_schedule":
            element["#title_display"] = "none"
            element["#trim"] = True
            element["#sanitize"] = True
            element["#download"] = True
            element["#url"] = ADD_TO_SCHEDULE_URL

    def extra_info(self, component: LegacyComponent, element: Dict[str, Any]) -> None:
        """Hook for subclasses to add site-specific properties to an element."""

    def to_form_array(self, components: Optional[Iterable[LegacyComponent]] = None) -> Dict[str, Dict[str, Any]]:
        """
        Map components to elements keyed by form key, preserving order.

        Args:
            components: Components to map (defaults to all components of the form)

        Returns:
            Ordered dict of form key -> element
        """
        elements: Dict[str, Dict[str, Any]] = {}
        for component in (self.components if components is None else components):
            if component.form_key in elements:
                logger.warning(
                    f"Form {self.form.nid}: duplicate form key {component.form_key}, "
                    f"component {component.cid} replaces the earlier one"
                )
            elements[component.form_key] = self.create_element(component)
        return elements

"""Component mapping preview endpoint."""

from fastapi import APIRouter, HTTPException

from ..models import ComponentPreviewRequest, ComponentPreviewResponse, LegacyComponentIn
from ...exceptions import ComponentError
from ...models.legacy import LegacyComponent, LegacyForm
from ...services.component_mapper import ComponentMapper
from ...services.serialized import decode_extra

router = APIRouter()


def _to_component(data: LegacyComponentIn, nid: int) -> LegacyComponent:
    extra = data.extra
    if isinstance(extra, str):
        extra = decode_extra(extra, cid=data.cid, form_key=data.form_key)
    return LegacyComponent(
        cid=data.cid,
        form_key=data.form_key,
        name=data.name,
        type=data.type,
        extra=extra,
        required=data.required,
        value=data.value,
        weight=data.weight,
        nid=nid,
    )


@router.post("/component", response_model=ComponentPreviewResponse)
def preview_component(data: ComponentPreviewRequest):
    """Show the element a single legacy component maps to."""
    form = LegacyForm(**data.form.model_dump())
    try:
        component = _to_component(data.component, form.nid)
        siblings = [_to_component(s, form.nid) for s in data.siblings]
    except ComponentError as e:
        raise HTTPException(status_code=422, detail=str(e))

    mapper = ComponentMapper(form, [*siblings, component])
    return ComponentPreviewResponse(
        form_key=component.form_key,
        element=mapper.create_element(component),
    )

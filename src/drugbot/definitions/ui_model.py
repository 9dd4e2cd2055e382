"""
The DrugBot UI model: entity and aggregate property definitions.

Usage:
    from drugbot.definitions.ui_model import THE_UI_MODEL

    THE_UI_MODEL.get_entity_visible_properties("GenericDrugs")
    THE_UI_MODEL.get_aggregate("GenericRoute")
"""

from typing import List, Optional

from drugbot.models.ui_model import (
    AggregateRef,
    UIAggregateMeta,
    UIEntityMeta,
    UIModel,
    UIPropertyMeta,
)


def _p(
    name: str,
    ordinal: int,
    display_name: str,
    control_type: str = "text",
    editable: bool = True,
    visible: bool = True,
    required: bool = False,
    is_id: bool = False,
    placeholder: Optional[str] = None,
    select_values: Optional[List[str]] = None,
) -> UIPropertyMeta:
    return UIPropertyMeta(
        property_name=name,
        ordinal=ordinal,
        display_name=display_name,
        control_type=control_type,
        is_editable=editable,
        is_visible=visible,
        is_required=required,
        is_id=is_id,
        placeholder=placeholder,
        select_values=select_values,
    )


def _hidden(name: str, ordinal: int, display_name: str, is_id: bool = False) -> UIPropertyMeta:
    """Non-editable, non-visible bookkeeping column (uids, keys)."""
    return _p(name, ordinal, display_name, editable=False, visible=False, is_id=is_id)


def _read_only(name: str, ordinal: int, display_name: str, control_type: str = "text") -> UIPropertyMeta:
    return _p(name, ordinal, display_name, control_type=control_type, editable=False)


# =============================================================================
# AGGREGATES (tabs under an entity)
# =============================================================================

GENERIC_ALIAS = UIAggregateMeta(
    aggregate_type="GenericAlias",
    display_name="Generic Alias",
    is_table=True,
    can_edit=True,
    property_defs=[
        _hidden("uid", 1, "ID", is_id=True),
        _hidden("generic_uid", 2, "Generic Drug ID"),
        _hidden("generic_key", 3, "Generic Key"),
        _p("alias", 3, "Alias Name", required=True, placeholder="Enter alternative name"),
    ],
)

GENERIC_ROUTE = UIAggregateMeta(
    aggregate_type="GenericRoute",
    display_name="Drug Route & Dosing",
    is_table=True,
    can_edit=True,
    property_defs=[
        _hidden("uid", 1, "ID", is_id=True),
        _hidden("route_key", 2, "Route Key"),
        _hidden("generic_uid", 7, "Generic Drug ID"),
        _p("route_type", 2, "Route Type", control_type="select", visible=False,
           select_values=["Subcutaneous", "Intravenous", "Oral"],
           placeholder="Select administration route"),
        _p("load_dose", 9, "Loading Dose", required=True, placeholder="Enter loading dose"),
        _p("load_measure", 9, "Loading Dose Unit", required=True,
           placeholder="Enter dose unit (mg, ml, etc.)"),
        _p("maintain_dose", 11, "Maintenance Dose", required=True,
           placeholder="Enter maintenance dose"),
        _p("maintain_measure", 11, "Maintenance Dose Unit", required=True,
           placeholder="Enter dose unit"),
        _p("montherapy", 13, "Monotherapy Status", required=True,
           placeholder="Enter monotherapy approval status"),
        _p("half_life", 13, "Half Life", control_type="textarea", required=True,
           placeholder="Enter drug half-life information"),
    ],
)

GENERIC_APPROVAL = UIAggregateMeta(
    aggregate_type="GenericApproval",
    display_name="Drug Approval",
    is_table=True,
    can_edit=True,
    property_defs=[
        _p("uid", 1, "ID", visible=False, is_id=True),
        _hidden("generic_uid", 2, "Generic Drug ID"),
        _p("country", 17, "Country", control_type="select", visible=False,
           select_values=["USA", "CAN", "FRA", "UK"], placeholder="Select country"),
        _p("indication", 17, "Indication", control_type="textarea", required=True,
           placeholder="Enter medical indication"),
        _p("approval_date", 19, "Approval Date", control_type="date", required=True,
           placeholder="Select approval date"),
        _p("box_warning", 19, "Box Warning", control_type="textarea", required=True,
           placeholder="Enter black box warning information"),
    ],
)

GENERIC_MANU_DRUGS = UIAggregateMeta(
    aggregate_type="GenericManuDrugs",
    display_name="Manufactured Drugs",
    is_table=True,
    can_edit=True,
    property_defs=[
        _hidden("uid", 1, "ID", is_id=True),
        _hidden("manu_drug_key", 2, "Product Key"),
        _hidden("generic_uid", 3, "Generic Drug ID"),
        _p("drug_name", 4, "Brand Name", required=True, placeholder="Enter brand name"),
        _p("manufacturer", 5, "Manufacturer", required=True, placeholder="Enter manufacturer name"),
        _p("biosimilar", 6, "Biosimilar"),
        _p("biosimilar_suffix", 7, "Biosimilar Suffix", placeholder="Enter FDA suffix (e.g., -aacf)"),
        _p("biosimilar_originator", 8, "Biosimilar Originator", placeholder="Enter original brand name"),
    ],
)

# Read-only join of every drug table, one column per (table, field)
_WIDE_VIEW_COLUMNS = [
    ("generic_key", "Generic Key"),
    ("generic_name", "Generic Name"),
    ("biologic", "Biologic"),
    ("mech_of_action", "Mechanism of Action"),
    ("class_or_type", "Class/Type"),
    ("target", "Target"),
    ("manu_drug_uid", None),
    ("manu_drug_key", "Manufactured Drug Key"),
    ("drug_name", "Drug Name"),
    ("manufacturer", "Manufacturer"),
    ("brandkey", "Brand Key"),
    ("biosimilar_suffix", "Biosimilar Suffix"),
    ("biosimilar", "Biosimilar"),
    ("biosimilar_originator", "Biosimilar Originator"),
    ("route_uid", None),
    ("route_key", "Route Key"),
    ("route_type", "Route Type"),
    ("load_measure", "Load Measure"),
    ("load_dose", "Load Dose"),
    ("load_reg", "Load Regimen"),
    ("maintain_dose", "Maintain Dose"),
    ("maintain_measure", "Maintain Measure"),
    ("maintain_reg", "Maintain Regimen"),
    ("montherapy", "Monotherapy"),
    ("half_life", "Half Life"),
    ("approval_uid", None),
    ("approval_route_type", "Approval Route Type"),
    ("country", "Country"),
    ("indication", "Indication"),
    ("populations", "Populations"),
    ("approval_date", "Approval Date"),
    ("discon_date", "Discontinuation Date"),
    ("box_warning", "Box Warning"),
    ("box_warning_date", "Box Warning Date"),
]

_HIDDEN_WIDE_VIEW_NAMES = {
    "manu_drug_uid": "Manufactured Drug UID",
    "route_uid": "Route UID",
    "approval_uid": "Approval UID",
}


def _wide_view_properties() -> List[UIPropertyMeta]:
    props = [_hidden("generic_uid", 1, "Generic UID", is_id=True)]
    for ordinal, (name, display_name) in enumerate(_WIDE_VIEW_COLUMNS, start=2):
        if display_name is None:
            props.append(_hidden(name, ordinal, _HIDDEN_WIDE_VIEW_NAMES[name]))
        else:
            control = "date" if name == "approval_date" else "text"
            props.append(_read_only(name, ordinal, display_name, control_type=control))
    return props


GENERIC_DRUGS_WIDE_VIEW = UIAggregateMeta(
    aggregate_type="GenericDrugsWideView",
    display_name="Complete Drug Information",
    is_table=True,
    can_edit=False,
    property_defs=_wide_view_properties(),
)

ENTITY_AGGREGATES = {
    agg.aggregate_type: agg
    for agg in (GENERIC_ALIAS, GENERIC_ROUTE, GENERIC_APPROVAL, GENERIC_MANU_DRUGS, GENERIC_DRUGS_WIDE_VIEW)
}

# =============================================================================
# ENTITIES
# =============================================================================

GENERIC_DRUGS = UIEntityMeta(
    entity_type="GenericDrugs",
    display_name="Generic",
    plural_name="Generic Drugs",
    property_defs=[
        _hidden("uid", 1, "ID", is_id=True),
        _p("generic_key", 2, "Generic Key", editable=False, visible=False,
           placeholder="Auto-generated key"),
        _p("generic_name", 23, "Generic Name", required=True, placeholder="Enter generic drug name"),
        _p("biologic", 23, "Biologic Classification", control_type="textarea", required=True,
           placeholder="Enter biologic information"),
        _p("mech_of_action", 25, "Mechanism of Action", required=True,
           placeholder="Enter mechanism of action"),
        _p("class_or_type", 25, "Drug Class/Type", required=True,
           placeholder="Enter drug class or type"),
        _p("target", 27, "Target", required=True, placeholder="Enter drug target (e.g., TNFi)"),
    ],
    aggregate_refs=[
        AggregateRef(aggregate_type="GenericManuDrugs", display_name="Manufactured Drugs", ordinal=1),
        AggregateRef(aggregate_type="GenericRoute", display_name="Drug Route & Dosing", ordinal=2),
        AggregateRef(aggregate_type="GenericApproval", display_name="Drug Approval", ordinal=3),
        AggregateRef(aggregate_type="GenericAlias", display_name="Aliases", ordinal=4),
        AggregateRef(aggregate_type="GenericDrugsWideView", display_name="Complete Drug Information", ordinal=5),
    ],
)

MANU_DRUGS = UIEntityMeta(
    entity_type="ManuDrugs",
    display_name="Branded Drug",
    plural_name="Manufactured Drugs",
    property_defs=[
        _p("uid", 27, "ID", required=True, is_id=True),
        _hidden("manu_drug_key", 2, "Product Key"),
        _hidden("generic_key", 3, "Generic Key"),
        _hidden("generic_uid", 30, "Generic Drug ID", is_id=True),
        _p("drug_name", 2, "Brand Name", visible=False, placeholder="Enter brand name"),
        _p("manufacturer", 32, "Manufacturer", required=True, placeholder="Enter manufacturer name"),
        _p("biosimilar", 32, "Biosimilar", required=True),
        _p("biosimilar_suffix", 34, "Biosimilar Suffix", required=True,
           placeholder="Enter FDA suffix (e.g., -aacf)"),
        _p("biosimilar_originator", 34, "Biosimilar Originator", required=True,
           placeholder="Enter original brand name"),
    ],
)

ENTITIES = {entity.entity_type: entity for entity in (GENERIC_DRUGS, MANU_DRUGS)}

THE_UI_MODEL = UIModel(ENTITIES, ENTITY_AGGREGATES)

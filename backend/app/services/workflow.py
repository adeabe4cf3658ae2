"""Registration workflow state machine.

A registration's position is the pair (status, step) plus five approval
gates. Every change to any of them goes through `apply_action`, which
looks the move up in `TRANSITIONS` and refuses anything not listed:

    submit_contact_details   contact-details → company-details
    approve_payment          gate: payment_approved
    reject_payment           → payment-rejected (terminal, delete only)
    submit_company_details   needs payment_approved → documentation
    resubmit_company_details only before details_approved
    approve_details          gate: details_approved
    publish_documents        needs details_approved
    acknowledge_documents    needs documents_published
    submit_documentation     needs documents_acknowledged → incorporate
    reject_balance_payment   back to documentation
    approve_documents        gate: documents_approved
    complete                 needs documents_approved → completed

Clients that PUT whole registrations never name an action; for them
`infer_action` works out which single action the requested field
changes correspond to. An approval sent together with the status the
dashboard shows afterwards (`APPROVAL_ECHOES`) counts as that approval.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, fields, replace

from app.middleware.exceptions import ConflictError
from app.models.registration import Registration, RegistrationStatus, RegistrationStep

S = RegistrationStatus
P = RegistrationStep


class InvalidTransition(ConflictError):
    def __init__(self, message: str):
        super().__init__(message, error_code="INVALID_TRANSITION")


class Action(str, enum.Enum):
    SUBMIT_CONTACT_DETAILS = "submit_contact_details"
    APPROVE_PAYMENT = "approve_payment"
    REJECT_PAYMENT = "reject_payment"
    SUBMIT_COMPANY_DETAILS = "submit_company_details"
    RESUBMIT_COMPANY_DETAILS = "resubmit_company_details"
    APPROVE_DETAILS = "approve_details"
    PUBLISH_DOCUMENTS = "publish_documents"
    ACKNOWLEDGE_DOCUMENTS = "acknowledge_documents"
    SUBMIT_DOCUMENTATION = "submit_documentation"
    REJECT_BALANCE_PAYMENT = "reject_balance_payment"
    APPROVE_DOCUMENTS = "approve_documents"
    COMPLETE = "complete"


GATES = (
    "payment_approved",
    "details_approved",
    "documents_approved",
    "documents_published",
    "documents_acknowledged",
)

# Model attributes that make up the workflow position
WORKFLOW_FIELDS = frozenset({"status", "current_step", *GATES})


@dataclass(frozen=True)
class WorkflowState:
    status: RegistrationStatus
    step: RegistrationStep
    payment_approved: bool = False
    details_approved: bool = False
    documents_approved: bool = False
    documents_published: bool = False
    documents_acknowledged: bool = False

    @classmethod
    def initial(cls) -> WorkflowState:
        return cls(status=S.PAYMENT_PROCESSING, step=P.CONTACT_DETAILS)

    @classmethod
    def of(cls, registration: Registration) -> WorkflowState:
        return cls(
            status=RegistrationStatus(registration.status),
            step=RegistrationStep(registration.current_step),
            **{gate: bool(getattr(registration, gate)) for gate in GATES},
        )

    def apply_to(self, registration: Registration) -> None:
        registration.status = self.status
        registration.current_step = self.step
        for gate in GATES:
            setattr(registration, gate, getattr(self, gate))

    def changes_from(self, other: WorkflowState) -> dict:
        """Fields that differ from ``other``, as {name: new value}."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) != getattr(other, f.name)
        }


@dataclass(frozen=True)
class Transition:
    sources: tuple[tuple[RegistrationStatus, RegistrationStep], ...]
    target: tuple[RegistrationStatus, RegistrationStep] | None = None
    requires: dict[str, bool] = field(default_factory=dict)
    sets: dict[str, bool] = field(default_factory=dict)


TRANSITIONS: dict[Action, Transition] = {
    Action.SUBMIT_CONTACT_DETAILS: Transition(
        sources=((S.PAYMENT_PROCESSING, P.CONTACT_DETAILS),),
        target=(S.PAYMENT_PROCESSING, P.COMPANY_DETAILS),
    ),
    Action.APPROVE_PAYMENT: Transition(
        sources=((S.PAYMENT_PROCESSING, P.COMPANY_DETAILS),),
        sets={"payment_approved": True},
    ),
    Action.REJECT_PAYMENT: Transition(
        sources=(
            (S.PAYMENT_PROCESSING, P.CONTACT_DETAILS),
            (S.PAYMENT_PROCESSING, P.COMPANY_DETAILS),
        ),
        sets={"payment_approved": False},
    ),
    Action.SUBMIT_COMPANY_DETAILS: Transition(
        sources=((S.PAYMENT_PROCESSING, P.COMPANY_DETAILS),),
        target=(S.DOCUMENTATION_PROCESSING, P.DOCUMENTATION),
        requires={"payment_approved": True},
    ),
    Action.RESUBMIT_COMPANY_DETAILS: Transition(
        sources=((S.DOCUMENTATION_PROCESSING, P.DOCUMENTATION),),
        requires={"details_approved": False},
    ),
    Action.APPROVE_DETAILS: Transition(
        sources=((S.DOCUMENTATION_PROCESSING, P.DOCUMENTATION),),
        sets={"details_approved": True},
    ),
    Action.PUBLISH_DOCUMENTS: Transition(
        sources=((S.DOCUMENTATION_PROCESSING, P.DOCUMENTATION),),
        requires={"details_approved": True},
        sets={"documents_published": True},
    ),
    Action.ACKNOWLEDGE_DOCUMENTS: Transition(
        sources=((S.DOCUMENTATION_PROCESSING, P.DOCUMENTATION),),
        requires={"documents_published": True},
        sets={"documents_acknowledged": True},
    ),
    Action.SUBMIT_DOCUMENTATION: Transition(
        sources=((S.DOCUMENTATION_PROCESSING, P.DOCUMENTATION),),
        target=(S.INCORPORATION_PROCESSING, P.INCORPORATE),
        requires={"documents_acknowledged": True},
    ),
    Action.REJECT_BALANCE_PAYMENT: Transition(
        sources=(
            (S.INCORPORATION_PROCESSING, P.INCORPORATE),
            (S.DOCUMENTATION_PROCESSING, P.DOCUMENTATION),
        ),
        target=(S.DOCUMENTATION_PROCESSING, P.DOCUMENTATION),
    ),
    Action.APPROVE_DOCUMENTS: Transition(
        sources=((S.INCORPORATION_PROCESSING, P.INCORPORATE),),
        sets={"documents_approved": True},
    ),
    Action.COMPLETE: Transition(
        sources=((S.INCORPORATION_PROCESSING, P.INCORPORATE),),
        target=(S.COMPLETED, P.INCORPORATE),
        requires={"documents_approved": True},
    ),
}

# Reject payment keeps the step but moves to the terminal status
_STATUS_ONLY_TARGETS = {Action.REJECT_PAYMENT: S.PAYMENT_REJECTED}

# Status/step values admin dashboards send alongside an approval gate.
# They are accepted as part of the approval; the stored position still
# follows the table.
APPROVAL_ECHOES: dict[Action, dict] = {
    Action.APPROVE_PAYMENT: {"status": S.DOCUMENTATION_PROCESSING},
    Action.APPROVE_DETAILS: {"status": S.INCORPORATION_PROCESSING},
    Action.APPROVE_DOCUMENTS: {"status": S.INCORPORATION_PROCESSING, "step": P.INCORPORATE},
}

ADMIN_ACTIONS = frozenset({
    Action.APPROVE_PAYMENT,
    Action.REJECT_PAYMENT,
    Action.APPROVE_DETAILS,
    Action.PUBLISH_DOCUMENTS,
    Action.REJECT_BALANCE_PAYMENT,
    Action.APPROVE_DOCUMENTS,
    Action.COMPLETE,
})

# Fields a customer edits while filling in step 2
COMPANY_DETAIL_FIELDS = frozenset({
    "company_name_english",
    "company_name_sinhala",
    "is_foreign_owned",
    "business_address_number",
    "business_address_street",
    "business_address_city",
    "postal_code",
    "share_price",
    "number_of_shareholders",
    "shareholders",
    "make_simple_books_secretary",
    "number_of_directors",
    "directors",
    "import_export_status",
    "imports_to_add",
    "exports_to_add",
    "other_business_activities",
    "drama_sedaka_division",
    "business_email",
    "business_contact_number",
})

ATTACHMENT_FIELDS = frozenset({
    "payment_receipt",
    "balance_payment_receipt",
    "form1",
    "letter_of_engagement",
    "aoa",
    "form18",
    "address_proof",
    "customer_form1",
    "customer_letter_of_engagement",
    "customer_aoa",
    "customer_form18",
    "customer_address_proof",
    "incorporation_certificate",
    "step3_additional_doc",
    "step3_signed_additional_doc",
    "step4_final_additional_doc",
})


# ── Core ─────────────────────────────────────────────────────

def _check(state: WorkflowState, action: Action) -> Transition:
    transition = TRANSITIONS[action]
    if (state.status, state.step) not in transition.sources:
        raise InvalidTransition(
            f"Cannot {action.value.replace('_', ' ')} while registration is "
            f"{state.status.value} at step {state.step.value}"
        )
    for gate, expected in transition.requires.items():
        if getattr(state, gate) != expected:
            verb = "requires" if expected else "is not allowed after"
            raise InvalidTransition(
                f"{action.value.replace('_', ' ').capitalize()} {verb} {gate.replace('_', ' ')}"
            )
    return transition


def apply_action(state: WorkflowState, action: Action | str) -> WorkflowState:
    """Return the state after ``action``; raise InvalidTransition if illegal."""
    try:
        action = Action(action)
    except ValueError:
        raise InvalidTransition(f"Unknown workflow action: {action}")

    transition = _check(state, action)
    new_state = replace(state, **transition.sets)
    if transition.target is not None:
        status, step = transition.target
        new_state = replace(new_state, status=status, step=step)
    elif action in _STATUS_ONLY_TARGETS:
        new_state = replace(new_state, status=_STATUS_ONLY_TARGETS[action])
    return new_state


def allowed_actions(state: WorkflowState) -> list[Action]:
    """Actions that would succeed from ``state``, in table order."""
    allowed = []
    for action in TRANSITIONS:
        try:
            _check(state, action)
        except InvalidTransition:
            continue
        allowed.append(action)
    return allowed


def infer_action(current: WorkflowState, requested: dict) -> Action | None:
    """Map requested workflow-field values to the one action producing them.

    ``requested`` uses model attribute names (``status``, ``current_step``
    and the gate names); keys it omits keep their current value. Returns
    None when nothing workflow-related changes.
    """
    target_values = {}
    if "status" in requested and requested["status"] is not None:
        target_values["status"] = RegistrationStatus(requested["status"])
    if "current_step" in requested and requested["current_step"] is not None:
        target_values["step"] = RegistrationStep(requested["current_step"])
    for gate in GATES:
        if gate in requested and requested[gate] is not None:
            target_values[gate] = bool(requested[gate])

    target = replace(current, **target_values)
    if target == current:
        return None

    candidates = allowed_actions(current)
    matches = [
        action for action in candidates
        if apply_action(current, action) == target
    ]
    if not matches:
        matches = [
            action for action in candidates
            if action in APPROVAL_ECHOES
            and replace(apply_action(current, action), **APPROVAL_ECHOES[action]) == target
        ]
    if len(matches) != 1:
        changed = ", ".join(sorted(target.changes_from(current)))
        raise InvalidTransition(
            f"Change to {changed} is not a valid step from "
            f"{current.status.value} / {current.step.value}"
        )
    return matches[0]


def check_content_edit(state: WorkflowState, changed: set[str]) -> Action | None:
    """Validate a non-workflow edit against the current state.

    Returns RESUBMIT_COMPANY_DETAILS when the edit re-submits step-2 data
    during documentation, so the caller can record it; otherwise None.
    """
    if not changed:
        return None
    if state.status == S.PAYMENT_REJECTED:
        raise InvalidTransition("A rejected registration can only be deleted")
    if state.status == S.COMPLETED and changed - ATTACHMENT_FIELDS:
        raise InvalidTransition("A completed registration only accepts document changes")
    if state.status == S.DOCUMENTATION_PROCESSING and changed & COMPANY_DETAIL_FIELDS:
        apply_action(state, Action.RESUBMIT_COMPANY_DETAILS)
        return Action.RESUBMIT_COMPANY_DETAILS
    return None

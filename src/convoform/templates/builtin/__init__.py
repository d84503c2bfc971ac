"""Templates built-in e prioridades de registro (maior = exibido primeiro)."""

from convoform.templates.builtin.customer_feedback import CUSTOMER_FEEDBACK_TEMPLATE
from convoform.templates.builtin.general_intake import GENERAL_INTAKE_TEMPLATE
from convoform.templates.builtin.it_helpdesk import IT_HELPDESK_TEMPLATE
from convoform.templates.builtin.patient_intake import PATIENT_INTAKE_TEMPLATE

BUILT_IN_TEMPLATES = (
    (IT_HELPDESK_TEMPLATE, 100),
    (CUSTOMER_FEEDBACK_TEMPLATE, 90),
    (PATIENT_INTAKE_TEMPLATE, 80),
    (GENERAL_INTAKE_TEMPLATE, 50),
)

BUILT_IN_TEMPLATE_IDS = frozenset(template.id for template, _ in BUILT_IN_TEMPLATES)

__all__ = [
    "BUILT_IN_TEMPLATES",
    "BUILT_IN_TEMPLATE_IDS",
    "CUSTOMER_FEEDBACK_TEMPLATE",
    "GENERAL_INTAKE_TEMPLATE",
    "IT_HELPDESK_TEMPLATE",
    "PATIENT_INTAKE_TEMPLATE",
]

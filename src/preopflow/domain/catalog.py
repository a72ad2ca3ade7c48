"""Static catalog of circuit steps, labels and flow requirements."""

from typing import Dict, FrozenSet, Iterable, List, Tuple

from .enums.circuit import CircuitStep, FlowType, MedicalSpecialty, StepStatus
from .errors import UnknownFlowTypeError

# Canonical order used for seeding, reports and queue overviews
STEP_ORDER: List[CircuitStep] = [
    CircuitStep.ESPECIALISTA,
    CircuitStep.TRIAGEM_MEDICA,
    CircuitStep.EXAMES_LAB_ECG,
    CircuitStep.AGENDAMENTO,
    CircuitStep.CARDIOLOGISTA,
    CircuitStep.EXAME_IMAGEM,
]

PREOP_STEPS: List[CircuitStep] = [
    CircuitStep.TRIAGEM_MEDICA,
    CircuitStep.EXAMES_LAB_ECG,
    CircuitStep.AGENDAMENTO,
]

STEP_LABELS: Dict[CircuitStep, str] = {
    CircuitStep.TRIAGEM_MEDICA: "Triagem Médica",
    CircuitStep.EXAMES_LAB_ECG: "Exames Lab/ECG",
    CircuitStep.AGENDAMENTO: "Agendamento",
    CircuitStep.CARDIOLOGISTA: "Cardiologista",
    CircuitStep.EXAME_IMAGEM: "Exame de Imagem",
    CircuitStep.ESPECIALISTA: "Consulta Especialista",
}

STATUS_LABELS: Dict[StepStatus, str] = {
    StepStatus.PENDING: "Aguardando",
    StepStatus.CALLED: "Chamado",
    StepStatus.IN_PROGRESS: "Em Atendimento",
    StepStatus.COMPLETED: "Concluído",
}

FLOW_TYPE_LABELS: Dict[FlowType, str] = {
    FlowType.CONSULTA_ESPECIALISTA: "Primeira Consulta com Especialista",
    FlowType.CONSULTA_RETORNO: "Consulta de Retorno",
    FlowType.CIRCUITO_PREOP: "Circuito Pré-Operatório",
}

SPECIALTY_LABELS: Dict[MedicalSpecialty, str] = {
    MedicalSpecialty.ORTOPEDIA: "Ortopedia",
    MedicalSpecialty.OTORRINO: "Otorrino",
    MedicalSpecialty.OFTALMO: "Oftalmo",
    MedicalSpecialty.TRAUMA: "Trauma",
    MedicalSpecialty.GERAL: "Geral",
    MedicalSpecialty.UROLOGIA: "Urologia",
    MedicalSpecialty.GINECOLOGIA: "Ginecologia",
    MedicalSpecialty.CARDIOLOGIA: "Cardiologia",
    MedicalSpecialty.OUTROS: "Outros",
}

DEFAULT_DOUBLE_CAPACITY_STEPS: FrozenSet[CircuitStep] = frozenset(
    {CircuitStep.EXAMES_LAB_ECG, CircuitStep.AGENDAMENTO}
)


def required_steps(
    flow_type: FlowType, needs_cardio: bool = False, needs_image_exam: bool = False
) -> List[CircuitStep]:
    """Return the ordered steps to create for a newly registered patient.

    Specialist flows start with the consultation only; pre-op steps are added
    later through circuit re-entry when surgery is indicated.
    """
    if flow_type in (FlowType.CONSULTA_ESPECIALISTA, FlowType.CONSULTA_RETORNO):
        return [CircuitStep.ESPECIALISTA]
    if flow_type == FlowType.CIRCUITO_PREOP:
        return preop_steps(needs_cardio=needs_cardio, needs_image_exam=needs_image_exam)
    raise UnknownFlowTypeError(flow_type)


def preop_steps(needs_cardio: bool = False, needs_image_exam: bool = False) -> List[CircuitStep]:
    """Pre-operative step set, with the optional cardiology and imaging steps."""
    steps = list(PREOP_STEPS)
    if needs_cardio:
        steps.append(CircuitStep.CARDIOLOGISTA)
    if needs_image_exam:
        steps.append(CircuitStep.EXAME_IMAGEM)
    return steps


def station_capacity(
    step: CircuitStep,
    double_capacity_steps: Iterable[CircuitStep] = DEFAULT_DOUBLE_CAPACITY_STEPS,
) -> int:
    """How many patients a station of this step serves at the same time."""
    return 2 if step in set(double_capacity_steps) else 1


DEFAULT_STATION_COUNTS: Dict[str, int] = {
    CircuitStep.ESPECIALISTA.value: 3,
    CircuitStep.TRIAGEM_MEDICA.value: 2,
    CircuitStep.EXAMES_LAB_ECG.value: 2,
    CircuitStep.AGENDAMENTO.value: 1,
    CircuitStep.CARDIOLOGISTA.value: 1,
    CircuitStep.EXAME_IMAGEM.value: 1,
}


def station_layout(counts: Dict[str, int]) -> List[Tuple[CircuitStep, int, str]]:
    """Expand per-step station counts into (step, number, name) triples."""
    layout = []
    for step in STEP_ORDER:
        for number in range(1, counts.get(step.value, 0) + 1):
            layout.append((step, number, f"{STEP_LABELS[step]} {number}"))
    return layout

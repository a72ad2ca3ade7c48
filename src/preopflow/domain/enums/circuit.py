"""
Circuit step, status, flow and specialty enums for the pre-operative circuit.
"""

from enum import Enum


class CircuitStep(str, Enum):
    """Stages a patient can be required to go through."""
    TRIAGEM_MEDICA = "triagem_medica"
    EXAMES_LAB_ECG = "exames_lab_ecg"
    AGENDAMENTO = "agendamento"
    CARDIOLOGISTA = "cardiologista"
    EXAME_IMAGEM = "exame_imagem"
    ESPECIALISTA = "especialista"


class StepStatus(str, Enum):
    """Lifecycle of a single patient step row."""
    PENDING = "pending"
    CALLED = "called"              # Announced, waiting for the patient to arrive
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"

    @property
    def is_active(self) -> bool:
        """Whether the row occupies a station slot."""
        return self in (StepStatus.CALLED, StepStatus.IN_PROGRESS)


class FlowType(str, Enum):
    """How a patient enters the circuit."""
    CONSULTA_ESPECIALISTA = "consulta_especialista"  # First specialist visit
    CONSULTA_RETORNO = "consulta_retorno"            # Specialist return visit
    CIRCUITO_PREOP = "circuito_preop"                # Direct pre-op entry


class MedicalSpecialty(str, Enum):
    """Specialties a patient can be referred for."""
    ORTOPEDIA = "ORTOPEDIA"
    OTORRINO = "OTORRINO"
    OFTALMO = "OFTALMO"
    TRAUMA = "TRAUMA"
    GERAL = "GERAL"
    UROLOGIA = "UROLOGIA"
    GINECOLOGIA = "GINECOLOGIA"
    CARDIOLOGIA = "CARDIOLOGIA"
    OUTROS = "OUTROS"


class DischargeOutcome(str, Enum):
    """Specialist outcome when there is no surgical indication (informational)."""
    ALTA = "ALTA"
    EXAMES_COMPLEMENTARES = "EXAMES_COMPLEMENTARES"
    ACOMPANHAMENTO_AMBULATORIAL = "ACOMPANHAMENTO_AMBULATORIAL"


class ErrorCategory(str, Enum):
    """Failure taxonomy reported to callers."""
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    PRECONDITION = "precondition"
    CONFLICT = "conflict"
    FATAL = "fatal"

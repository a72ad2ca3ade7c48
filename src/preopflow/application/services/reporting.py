"""
Reporting aggregator: read-only statistics over a date window.
"""

from datetime import datetime
from typing import Dict, List

from ...core.utils.datetime_utils import whole_minutes_between
from ...domain.catalog import (
    FLOW_TYPE_LABELS,
    SPECIALTY_LABELS,
    STEP_LABELS,
    STEP_ORDER,
)
from ...domain.entities.patient import Patient
from ...domain.enums.circuit import CircuitStep, FlowType, MedicalSpecialty, StepStatus
from ..dto.circuit_dto import DayReport, FlowTypeReport, SpecialtyReport, StepReport
from ..ports.unit_of_work import UnitOfWork
from .policy import CircuitPolicy


class ReportingAggregator:
    def __init__(self, policy: CircuitPolicy) -> None:
        self._policy = policy

    async def day_report(self, uow: UnitOfWork, start: datetime, end: datetime) -> DayReport:
        patients = await uow.patients.find_created_between(start, end)
        completed_rows = await uow.steps.find_created_between(
            start, end, statuses=[StepStatus.COMPLETED]
        )

        step_reports = []
        for step in STEP_ORDER:
            rows = [r for r in completed_rows if r.step == step]
            # Whole minutes; rows without both timestamps only count toward the total
            times = [
                whole_minutes_between(r.started_at, r.completed_at)
                for r in rows
                if r.started_at is not None and r.completed_at is not None
            ]
            times = [t for t in times if t > 0]
            # Halves round up; durations are positive
            avg = int(sum(times) / len(times) + 0.5) if times else 0
            step_reports.append(
                StepReport(
                    step=step,
                    label=STEP_LABELS[step],
                    total=len(rows),
                    avg_time_minutes=avg,
                    min_time_minutes=min(times) if times else 0,
                    max_time_minutes=max(times) if times else 0,
                    is_bottleneck=len(rows) > 0
                    and avg > self._policy.bottleneck_threshold_minutes,
                )
            )

        consulted_ids = {
            r.patient_id for r in completed_rows if r.step == CircuitStep.ESPECIALISTA
        }
        consulted = await uow.patients.find_many(consulted_ids)

        return DayReport(
            start=start,
            end=end,
            total_patients=len(patients),
            completed_patients=sum(1 for p in patients if p.is_completed),
            step_reports=step_reports,
            specialty_reports=self._specialty_reports(list(consulted.values())),
            flow_type_reports=self._flow_type_reports(patients),
            pending_scheduling=await uow.patients.find_pending_scheduling(),
        )

    @staticmethod
    def _specialty_reports(consulted: List[Patient]) -> List[SpecialtyReport]:
        reports = []
        for specialty in MedicalSpecialty:
            group = [p for p in consulted if p.specialty == specialty]
            if not group:
                continue
            indicated = sum(1 for p in group if p.has_surgery_indication)
            reports.append(
                SpecialtyReport(
                    specialty=specialty,
                    label=SPECIALTY_LABELS[specialty],
                    consultations=len(group),
                    surgery_indications=indicated,
                    conversion_rate=round(indicated / len(group), 4),
                )
            )
        return reports

    @staticmethod
    def _flow_type_reports(patients: List[Patient]) -> List[FlowTypeReport]:
        counts: Dict[FlowType, List[int]] = {flow: [0, 0] for flow in FlowType}
        for patient in patients:
            counts[patient.flow_type][0] += 1
            if patient.is_completed:
                counts[patient.flow_type][1] += 1
        return [
            FlowTypeReport(
                flow_type=flow,
                label=FLOW_TYPE_LABELS[flow],
                registered=registered,
                completed=completed,
            )
            for flow, (registered, completed) in counts.items()
        ]

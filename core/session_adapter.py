"""
Moteur d'adaptation du plan de course

Ajuste les séances à venir selon la performance, l'effort ressenti et
l'assiduité. Les méthodes retournent des ajustements sans les appliquer,
sauf apply_adjustments() et shift_schedule().
"""
from datetime import date, timedelta
from typing import Optional, Tuple
from uuid import UUID

from models import TrainingPlan, TrainingSession, RunType
from config.settings import (
    OVER_ACHIEVER_RATIO, UNDER_ACHIEVER_RATIO, TAPER_LOCK_DAYS, MISSED_VOLUME_CAP
)


class SessionAdjustment:
    """Modification proposée pour une séance future"""

    def __init__(
        self,
        session_id: UUID,
        reason: str,
        new_target_distance: Optional[float] = None,
        new_run_type: Optional[RunType] = None
    ):
        self.session_id = session_id
        self.reason = reason
        self.new_target_distance = new_target_distance
        self.new_run_type = new_run_type

    def to_dict(self) -> dict:
        """Convertit en dictionnaire"""
        return {
            'session_id': str(self.session_id),
            'reason': self.reason,
            'new_target_distance': self.new_target_distance,
            'new_run_type': self.new_run_type.value if self.new_run_type else None
        }

    def __repr__(self) -> str:
        return f"SessionAdjustment({self.session_id}, {self.reason!r})"


class TrainingAdaptationEngine:
    """
    Logique d'adaptation du plan

    Prend en compte:
    - Sur-performance (>120% de la cible) et sous-performance (<80%)
    - Forme ressentie avant la sortie
    - Séances manquées de la semaine écoulée
    - Verrouillage en fin d'affûtage
    """

    def __init__(self, taper_lock_days: int = TAPER_LOCK_DAYS):
        self.taper_lock_days = taper_lock_days

    # ------------------------------------------------------------------
    # Après la sortie
    # ------------------------------------------------------------------

    def adapt_plan(
        self,
        plan: TrainingPlan,
        completed_session: TrainingSession,
        effort: int,
        today: Optional[date] = None
    ) -> list[SessionAdjustment]:
        """
        Adapte les prochaines séances après une sortie effectuée

        Args:
            plan: Plan actif
            completed_session: Séance qui vient d'être effectuée
            effort: Effort ressenti (1-5)
            today: Date du jour (injectable)

        Returns:
            Liste d'ajustements (vide si rien à changer)
        """
        today = today or date.today()
        if plan.is_taper_locked(today, self.taper_lock_days):
            return []

        actual = completed_session.actual_distance
        target = completed_session.target_distance
        if actual is None or target <= 0:
            return []

        if actual > target * OVER_ACHIEVER_RATIO:
            return self._handle_over_achiever(plan, completed_session, effort, today)
        if actual < target * UNDER_ACHIEVER_RATIO:
            return self._handle_under_achiever(plan, actual, target, today)
        return []

    def _handle_over_achiever(
        self,
        plan: TrainingPlan,
        completed_session: TrainingSession,
        effort: int,
        today: date
    ) -> list[SessionAdjustment]:
        """
        Pas d'augmentation de la sortie suivante (risque de blessure).
        Sortie longue +5% si l'effort était facile, récupération forcée si
        deux jours difficiles s'enchaînent.
        """
        future_sessions = plan.next_running_sessions(5, today)
        yesterday = completed_session.date - timedelta(days=1)

        previous_hard = any(
            s.date == yesterday and s.is_completed and (s.perceived_effort or 2) >= 3
            for s in plan.sessions
        )

        if previous_hard:
            if future_sessions:
                return [SessionAdjustment(
                    session_id=future_sessions[0].id,
                    new_target_distance=0.0,
                    new_run_type=RunType.RECOVERY,
                    reason="Back-to-back hard efforts. Recovery day recommended."
                )]
            return []

        if effort <= 2:
            for session in future_sessions:
                if session.run_type == RunType.LONG_RUN:
                    return [SessionAdjustment(
                        session_id=session.id,
                        new_target_distance=session.target_distance * 1.05,
                        reason="Strong performance. Long run boosted by 5%."
                    )]
        return []

    def _handle_under_achiever(
        self,
        plan: TrainingPlan,
        actual: float,
        target: float,
        today: date
    ) -> list[SessionAdjustment]:
        """80% du volume manquant réparti sur les 3 prochaines sorties faciles"""
        add_on = (target - actual) * 0.8 / 3.0
        easy_runs = [
            s for s in plan.next_running_sessions(10, today)
            if s.run_type in (RunType.RECOVERY, RunType.BASE)
        ][:3]

        return [
            SessionAdjustment(
                session_id=s.id,
                new_target_distance=s.target_distance + add_on,
                reason=f"Volume redistribution: +{add_on:.1f} mi from missed run."
            )
            for s in easy_runs
        ]

    # ------------------------------------------------------------------
    # Avant la sortie
    # ------------------------------------------------------------------

    def pre_run_adjustment(self, session: TrainingSession, feeling_score: float) -> Tuple[float, str]:
        """
        Ajuste la séance du jour selon la forme ressentie (0-1)

        Returns:
            Tuple (distance ajustée, message)
        """
        target = session.target_distance

        if feeling_score >= 0.7:
            return target, "Feeling great! Stick to the plan."
        if feeling_score >= 0.3:
            # Jusqu'à -20% selon la forme
            reduction_factor = 1.0 - ((0.7 - feeling_score) / 0.4) * 0.2
            adjusted = target * reduction_factor
            return adjusted, f"Adjusted to {adjusted:.1f} mi. Volume moves to your next easy run."

        return target * 0.5, "Take it easy today. Consider a light recovery run or rest."

    def redistribute_pre_run_reduction(
        self,
        original_target: float,
        adjusted_target: float,
        plan: TrainingPlan,
        today: Optional[date] = None
    ) -> list[SessionAdjustment]:
        """Reporte le déficit (> 0.25 mi) sur les 2 prochaines sorties faciles ou longues"""
        deficit = original_target - adjusted_target
        if deficit <= 0.25:
            return []

        candidates = [
            s for s in plan.next_running_sessions(5, today)
            if s.run_type in (RunType.BASE, RunType.RECOVERY, RunType.LONG_RUN)
        ][:2]
        add_on = deficit / max(1, len(candidates))

        return [
            SessionAdjustment(
                session_id=s.id,
                new_target_distance=s.target_distance + add_on,
                reason=f"Pre-run adjustment redistribution: +{add_on:.1f} mi."
            )
            for s in candidates
        ]

    # ------------------------------------------------------------------
    # Séances manquées
    # ------------------------------------------------------------------

    def missed_sessions(self, plan: TrainingPlan, today: Optional[date] = None) -> list[TrainingSession]:
        """Sorties manquées sur les 7 derniers jours"""
        today = today or date.today()
        week_ago = today - timedelta(days=7)
        return [
            s for s in plan.sorted_sessions
            if week_ago <= s.date < today
            and s.was_missed(today)
            and s.run_type.counts_as_mileage
            and s.target_distance > 0
        ]

    def redistribute_missed_volume(
        self,
        plan: TrainingPlan,
        today: Optional[date] = None
    ) -> list[SessionAdjustment]:
        """
        Reprend le volume des sorties manquées de la semaine et le répartit
        sur les 3 prochaines sorties base/récupération, plafonné à +15% par
        séance
        """
        today = today or date.today()
        if plan.is_taper_locked(today, self.taper_lock_days):
            return []

        missed_volume = sum(s.target_distance for s in self.missed_sessions(plan, today))
        if missed_volume <= 0:
            return []

        candidates = [
            s for s in plan.next_running_sessions(10, today)
            if s.run_type in (RunType.BASE, RunType.RECOVERY)
        ][:3]
        if not candidates:
            return []

        share = missed_volume / len(candidates)
        adjustments = []
        for session in candidates:
            add_on = min(share, session.target_distance * MISSED_VOLUME_CAP)
            if add_on <= 0:
                continue
            adjustments.append(SessionAdjustment(
                session_id=session.id,
                new_target_distance=session.target_distance + add_on,
                reason=f"Missed volume redistribution: +{add_on:.1f} mi."
            ))
        return adjustments

    # ------------------------------------------------------------------
    # Scores
    # ------------------------------------------------------------------

    def calculate_compliance_score(self, plan: TrainingPlan, today: Optional[date] = None) -> float:
        """Assiduité sur 7 jours glissants (0-1)"""
        today = today or date.today()
        week_ago = today - timedelta(days=7)
        recent = [
            s for s in plan.sessions
            if week_ago <= s.date <= today and s.run_type != RunType.REST
        ]
        if not recent:
            return 1.0

        scores = []
        for session in recent:
            if session.is_skipped or session.was_missed(today):
                scores.append(0.0)
            elif not session.is_completed:
                scores.append(0.5)  # séance du jour, neutre
            elif session.target_distance <= 0:
                scores.append(1.0)  # cross-training effectué
            else:
                scores.append(min(session.completion_ratio, 1.5) / 1.5)

        return sum(scores) / len(scores)

    def calculate_confidence_score(self, plan: TrainingPlan, today: Optional[date] = None) -> float:
        """
        Niveau de préparation global (0-1)

        50% taux de réalisation, 30% précision du volume, 20% avancement du plan
        """
        today = today or date.today()
        completed_runs = [s for s in plan.sessions if s.is_completed and s.run_type != RunType.REST]
        past_scheduled = [s for s in plan.sessions if s.run_type != RunType.REST and s.date <= today]
        if not past_scheduled:
            return 0.5

        completion_rate = len(completed_runs) / len(past_scheduled)

        accuracies = [
            min(s.completion_ratio, 1.5) / 1.5
            for s in completed_runs if s.target_distance > 0
        ]
        volume_accuracy = sum(accuracies) / len(accuracies) if accuracies else 0.5

        confidence = completion_rate * 0.5 + volume_accuracy * 0.3 + plan.progress(today) * 0.2
        return min(max(confidence, 0.0), 1.0)

    # ------------------------------------------------------------------
    # Imprévus
    # ------------------------------------------------------------------

    def _pending_sessions(self, plan: TrainingPlan, today: date) -> list[TrainingSession]:
        return [s for s in plan.sessions if s.date >= today and not s.is_completed]

    def can_shift_schedule(self, plan: TrainingPlan, days: int, today: Optional[date] = None) -> bool:
        """Le décalage ne doit pas pousser de séance après la course"""
        pending = self._pending_sessions(plan, today or date.today())
        if not pending:
            return True
        last = max(s.date for s in pending)
        return last + timedelta(days=days) <= plan.race_date

    def shift_schedule(self, plan: TrainingPlan, days: int, today: Optional[date] = None):
        """Décale toutes les séances à venir de `days` jours"""
        for session in self._pending_sessions(plan, today or date.today()):
            session.date = session.date + timedelta(days=days)

    def apply_adjustments(self, adjustments: list[SessionAdjustment], plan: TrainingPlan):
        """Applique les ajustements aux séances du plan"""
        for adjustment in adjustments:
            session = plan.get_session(adjustment.session_id)
            if session is None:
                continue
            if adjustment.new_target_distance is not None:
                session.target_distance = adjustment.new_target_distance
            if adjustment.new_run_type is not None:
                session.run_type = adjustment.new_run_type

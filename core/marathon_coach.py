"""
Orchestrateur du coach de course

Cycle de vie du plan, validation des séances, adaptation, rapprochement
des sorties importées et préparation des séances Gym Mode.
"""
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, Optional
from uuid import UUID

from models import (
    TrainingPlan, TrainingSession, RaceDistance, RunType,
    WorkoutSession, ExerciseSet, ExerciseType, WorkoutSource
)
from core.plan_generator import TrainingPlanGenerator
from core.session_adapter import TrainingAdaptationEngine
from utils import plan_persistence
from utils.logger import get_logger
from config.settings import TRAINING_STATUS_THRESHOLDS

logger = get_logger(__name__)


class TrainingStatus(str, Enum):
    """Statut global affiché selon l'assiduité"""
    ON_TRACK = "on_track"
    STRUGGLING = "struggling"
    CRUSHING_IT = "crushing_it"

    @property
    def label(self) -> str:
        return {
            TrainingStatus.ON_TRACK: "On Track",
            TrainingStatus.STRUGGLING: "Needs Attention",
            TrainingStatus.CRUSHING_IT: "Crushing It",
        }[self]

    @property
    def color_name(self) -> str:
        return {
            TrainingStatus.ON_TRACK: "green",
            TrainingStatus.STRUGGLING: "orange",
            TrainingStatus.CRUSHING_IT: "purple",
        }[self]


class MarathonCoachManager:
    """
    Coordonne le plan actif et le moteur d'adaptation

    Les plans sont persistés en JSON dans `plans_dir` après chaque
    modification.
    """

    def __init__(
        self,
        plans_dir: Optional[Path] = None,
        engine: Optional[TrainingAdaptationEngine] = None,
        today: Callable[[], date] = date.today
    ):
        self.plans_dir = plans_dir
        self.engine = engine or TrainingAdaptationEngine()
        self._today = today

        self.active_plan: Optional[TrainingPlan] = None
        self.todays_session: Optional[TrainingSession] = None
        self.is_generating_plan = False
        self.last_adaptation_summary: Optional[str] = None
        self.show_post_run_check_in = False
        self.completed_session_for_check_in: Optional[TrainingSession] = None

        # Ids des séances auto-validées -> état du plan avant adaptation
        self._auto_completion_snapshots: dict[UUID, dict] = {}

    # ------------------------------------------------------------------
    # Cycle de vie du plan
    # ------------------------------------------------------------------

    def _save(self) -> None:
        if self.active_plan is not None:
            plan_persistence.save_plan(self.active_plan, self.plans_dir)

    def refresh_todays_session(self) -> None:
        self.todays_session = (
            self.active_plan.todays_session(self._today()) if self.active_plan else None
        )

    def create_plan(
        self,
        race_distance: RaceDistance,
        race_date: date,
        weekly_mileage: float,
        longest_run: float,
        rest_days: Optional[list[int]] = None
    ) -> TrainingPlan:
        """
        Crée un nouveau plan et génère toutes ses séances

        Raises:
            PlanGenerationError: si les paramètres ne permettent pas de plan
        """
        self.is_generating_plan = True
        try:
            generator = TrainingPlanGenerator(
                race_distance=race_distance,
                race_date=race_date,
                weekly_mileage=weekly_mileage,
                longest_recent_run=longest_run,
                start_date=self._today(),
                rest_days=rest_days
            )
            plan = generator.generate_plan()
        finally:
            self.is_generating_plan = False

        self.active_plan = plan
        self._auto_completion_snapshots.clear()
        self._save()
        self.refresh_todays_session()
        logger.info("🏁 Nouveau plan %s pour le %s", race_distance.display_name, race_date)
        return plan

    def load_active_plan(self) -> Optional[TrainingPlan]:
        """Charge le plan actif le plus récent"""
        self.active_plan = plan_persistence.load_active_plan(self.plans_dir)
        self.refresh_todays_session()
        return self.active_plan

    def cancel_plan(self) -> None:
        """Désactive le plan en cours"""
        if self.active_plan is None:
            return
        self.active_plan.is_active = False
        self._save()
        logger.info("🛑 Plan %s annulé", self.active_plan.id)
        self.active_plan = None
        self.todays_session = None
        self._auto_completion_snapshots.clear()

    # ------------------------------------------------------------------
    # Validation des séances
    # ------------------------------------------------------------------

    def complete_session(self, session: TrainingSession, actual_distance: float, effort: int) -> None:
        """Valide une séance et déclenche l'adaptation"""
        self._auto_completion_snapshots.pop(session.id, None)
        self._apply_completion(session, actual_distance, effort)
        self._save()

    def auto_complete_session(
        self,
        session: TrainingSession,
        actual_distance: float,
        default_effort: int = 2
    ) -> None:
        """
        Validation immédiate à la fin d'une séance guidée, avec un effort
        modéré par défaut en attendant le retour de l'utilisateur
        """
        if self.active_plan is None:
            return

        self._auto_completion_snapshots[session.id] = {
            'baselines': {
                s.id: (s.target_distance, s.run_type) for s in self.active_plan.sessions
            },
            'actual_distance': session.actual_distance,
            'perceived_effort': session.perceived_effort,
            'is_completed': session.is_completed,
            'summary': self.last_adaptation_summary,
        }

        self._apply_completion(session, actual_distance, default_effort)
        self._save()

    def refine_completed_session(self, session: TrainingSession, actual_distance: float, effort: int) -> None:
        """
        Remplace une validation automatique par les données du check-in.
        L'adaptation automatique est annulée avant d'être recalculée.
        """
        snapshot = self._auto_completion_snapshots.pop(session.id, None)
        if snapshot is not None and self.active_plan is not None:
            for plan_session in self.active_plan.sessions:
                baseline = snapshot['baselines'].get(plan_session.id)
                if baseline is None:
                    continue
                plan_session.target_distance, plan_session.run_type = baseline

            session.actual_distance = snapshot['actual_distance']
            session.perceived_effort = snapshot['perceived_effort']
            session.is_completed = snapshot['is_completed']
            self.last_adaptation_summary = snapshot['summary']

        self._apply_completion(session, actual_distance, effort)
        self._save()

    def mark_cross_training_complete(
        self,
        session: TrainingSession,
        activity_name: str,
        duration_minutes: int
    ) -> None:
        """Valide une journée de cross-training et rafraîchit les scores"""
        if session.actual_distance is None:
            session.actual_distance = 0.0
        if session.perceived_effort is None:
            session.perceived_effort = 2
        session.is_completed = True
        session.notes = f"{activity_name} - {duration_minutes} min"

        if self.active_plan is not None:
            self._refresh_scores()
            self.last_adaptation_summary = f"{activity_name} logged. Great consistency."
            self.refresh_todays_session()

        self._auto_completion_snapshots.pop(session.id, None)
        self._save()

    def _refresh_scores(self) -> None:
        today = self._today()
        plan = self.active_plan
        plan.compliance_score = self.engine.calculate_compliance_score(plan, today)
        plan.confidence_score = self.engine.calculate_confidence_score(plan, today)

    def _apply_completion(self, session: TrainingSession, actual_distance: float, effort: int) -> None:
        session.mark_as_completed(actual_distance, perceived_effort=effort)

        plan = self.active_plan
        if plan is None:
            return

        today = self._today()
        adjustments = self.engine.adapt_plan(plan, session, effort, today)
        self.engine.apply_adjustments(adjustments, plan)
        self._refresh_scores()

        self.last_adaptation_summary = adjustments[0].reason if adjustments else None
        for adjustment in adjustments:
            logger.info("🔄 %s", adjustment.reason)

        if plan.race_date < today:
            plan.is_completed = True
            logger.info("🎉 Plan %s terminé", plan.id)

        if actual_distance > session.target_distance * 1.15 and effort <= 2:
            self.last_adaptation_summary = "Crushing it! Your confidence score just got a boost."

        self.refresh_todays_session()

    # ------------------------------------------------------------------
    # Ajustements
    # ------------------------------------------------------------------

    def apply_pre_run_adjustment(self, session: TrainingSession, feeling_score: float) -> str:
        """Adapte la séance du jour à la forme ressentie, retourne le conseil"""
        adjusted, suggestion = self.engine.pre_run_adjustment(session, feeling_score)

        original_target = session.target_distance
        session.target_distance = adjusted
        session.pre_run_feeling = feeling_score

        if self.active_plan is not None:
            redistributions = self.engine.redistribute_pre_run_reduction(
                original_target, adjusted, self.active_plan, self._today()
            )
            self.engine.apply_adjustments(redistributions, self.active_plan)

        self.last_adaptation_summary = suggestion
        self._save()
        return suggestion

    def life_happens(self) -> bool:
        """Décale les séances à venir d'un jour si la course le permet"""
        plan = self.active_plan
        if plan is None:
            return False

        today = self._today()
        if not self.engine.can_shift_schedule(plan, 1, today):
            logger.warning("⚠️ Impossible de décaler le plan : la course est trop proche")
            return False

        self.engine.shift_schedule(plan, 1, today)
        self._save()
        self.refresh_todays_session()
        return True

    def distribute_missed_volume(self) -> None:
        """
        Répartit le volume des sorties manquées de la semaine sur les
        prochaines sorties faciles. Les séances reprises sont marquées
        sautées pour ne pas être comptées deux fois.
        """
        plan = self.active_plan
        if plan is None:
            return

        today = self._today()
        missed = self.engine.missed_sessions(plan, today)
        adjustments = self.engine.redistribute_missed_volume(plan, today)
        if not adjustments:
            return

        self.engine.apply_adjustments(adjustments, plan)
        for session in missed:
            session.is_skipped = True
        self.last_adaptation_summary = adjustments[0].reason
        logger.info("📦 Volume de %d sortie(s) manquée(s) redistribué", len(missed))
        self._save()

    # ------------------------------------------------------------------
    # Sorties importées
    # ------------------------------------------------------------------

    def match_synced_runs(self, workouts: Iterable[WorkoutSession]) -> list[TrainingSession]:
        """
        Associe les sorties importées (Garmin, HealthKit) aux séances du
        même jour. La séance n'est pas validée : l'effort ressenti est
        demandé au check-in.

        Returns:
            Séances mises à jour
        """
        plan = self.active_plan
        if plan is None:
            return []

        matched = []
        synced_sources = (WorkoutSource.GARMIN, WorkoutSource.HEALTHKIT)
        for workout in workouts:
            if workout.type != "Running" or workout.source not in synced_sources:
                continue

            session = next(
                (s for s in plan.sessions
                 if s.date == workout.timestamp.date()
                 and not s.is_completed
                 and s.run_type != RunType.REST),
                None
            )
            if session is None:
                continue

            distance = workout.total_distance
            if distance > 0:
                session.actual_distance = distance
                session.synced_workout_id = workout.id
                self.completed_session_for_check_in = session
                self.show_post_run_check_in = True
                matched.append(session)

        if matched:
            logger.info("🔗 %d sortie(s) importée(s) rapprochée(s) du plan", len(matched))
        self._save()
        return matched

    # ------------------------------------------------------------------
    # Gym Mode
    # ------------------------------------------------------------------

    def build_gym_mode_session(self, training_session: TrainingSession) -> WorkoutSession:
        """Prépare une séance tapis pour une sortie du plan"""
        target = training_session.target_distance
        workout = WorkoutSession(
            title=f"{training_session.run_type.display_name} - {target:.1f} mi",
            type="Running"
        )
        exercise = workout.add_exercise("Treadmill", ExerciseType.CARDIO)

        if training_session.run_type == RunType.SPEED_WORK:
            exercise.sets.append(ExerciseSet(order_index=0, duration=600, speed=5.0))

            interval_count = max(4, int(target / 0.5))
            for i in range(interval_count):
                exercise.sets.append(ExerciseSet(order_index=1 + i, duration=120, speed=8.0))
                if i < interval_count - 1:
                    exercise.sets.append(
                        ExerciseSet(order_index=1 + interval_count + i, duration=90, speed=5.0)
                    )

            exercise.sets.append(ExerciseSet(order_index=100, duration=600, speed=4.5))

        elif training_session.run_type == RunType.TEMPO:
            exercise.sets.append(ExerciseSet(order_index=0, duration=600, speed=5.0))
            exercise.sets.append(ExerciseSet(order_index=1, distance=target * 0.7, speed=7.0))
            exercise.sets.append(ExerciseSet(order_index=2, duration=600, speed=4.5))

        else:
            speed = 5.0 if training_session.run_type == RunType.RECOVERY else 6.0
            exercise.sets.append(ExerciseSet(order_index=0, distance=target, speed=speed))

        return workout

    # ------------------------------------------------------------------
    # Affichage
    # ------------------------------------------------------------------

    @property
    def training_status(self) -> TrainingStatus:
        if self.active_plan is None:
            return TrainingStatus.ON_TRACK
        score = self.active_plan.compliance_score
        if score >= TRAINING_STATUS_THRESHOLDS['crushing_it']:
            return TrainingStatus.CRUSHING_IT
        if score >= TRAINING_STATUS_THRESHOLDS['on_track']:
            return TrainingStatus.ON_TRACK
        return TrainingStatus.STRUGGLING

    @property
    def confidence_display(self) -> str:
        if self.active_plan is None:
            return "0%"
        return f"{int(self.active_plan.confidence_score * 100)}%"

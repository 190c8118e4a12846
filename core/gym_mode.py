"""
Gestionnaire du Gym Mode : séance en cours, navigation entre exercices,
supersets et minuteur de repos

Chaque changement d'état est répercuté dans l'état partagé du widget.
"""
from datetime import datetime, timedelta
from typing import Callable, Optional, Tuple
from uuid import UUID

from models import WorkoutSession, WorkoutExercise, ExerciseSet, WorkoutWidgetState, CardioPhase
from models.widget_state import format_elapsed_time
from core.cardio_session import CardioSession, TimedCardioSession
from core.errors import WorkoutStateError
from utils.shared_store import SharedDefaults
from utils.logger import get_logger
from config.settings import DEFAULT_REST_SECONDS

logger = get_logger(__name__)


class GymModeManager:
    """
    Suit la séance active en Gym Mode

    Les minuteurs (temps écoulé, repos) avancent via tick().
    """

    def __init__(
        self,
        store: Optional[SharedDefaults] = None,
        clock: Callable[[], datetime] = datetime.now,
        default_rest_duration: float = DEFAULT_REST_SECONDS
    ):
        self.store = store or SharedDefaults()
        self.clock = clock
        self.default_rest_duration = default_rest_duration

        self.active_session: Optional[WorkoutSession] = None
        self.current_exercise_index = 0
        self.current_set_index = 0
        self.elapsed_time = 0.0
        self.workout_start_time: Optional[datetime] = None

        self.is_rest_timer_active = False
        self.rest_time_remaining = 0.0
        self.rest_duration = 0.0

        self.cardio_session: Optional[CardioSession] = None

    @property
    def is_workout_active(self) -> bool:
        return self.active_session is not None

    def _require_session(self) -> WorkoutSession:
        if self.active_session is None:
            raise WorkoutStateError("Aucune séance en cours")
        return self.active_session

    # ------------------------------------------------------------------
    # Cycle de vie
    # ------------------------------------------------------------------

    def start_workout(self, session: WorkoutSession) -> None:
        """Démarre une nouvelle séance"""
        self.active_session = session
        self.current_exercise_index = 0
        self.current_set_index = 0
        self.elapsed_time = 0.0
        self.workout_start_time = self.clock()
        self._reset_rest()
        self.cardio_session = None

        logger.info("🔥 Séance démarrée : %s (%d exercices)", session.title, len(session.exercises))
        self.sync_widget_state()

    def resume_workout(self, session: WorkoutSession) -> None:
        """Reprend une séance en pause, au premier exercice incomplet"""
        self.active_session = session
        self.elapsed_time = session.duration
        self.current_exercise_index = 0
        self.current_set_index = 0

        for index, exercise in enumerate(session.sorted_exercises):
            if exercise.has_incomplete_sets:
                self.current_exercise_index = index
                self.current_set_index = self.next_incomplete_set_index(exercise)
                break

        self.workout_start_time = self.clock() - timedelta(seconds=self.elapsed_time)
        self._reset_rest()

        logger.info("▶️ Séance reprise : %s (%s)", session.title, self.formatted_elapsed_time)
        self.sync_widget_state()

    def end_workout(self) -> Optional[WorkoutSession]:
        """
        Termine la séance

        Returns:
            La séance terminée (durée et heure de fin renseignées), None si aucune
        """
        session = self.active_session
        if session is None:
            return None

        session.end_time = self.clock()
        session.duration = self.elapsed_time

        logger.info("✅ Séance terminée : %s (%s)", session.title, session.formatted_duration)
        self._reset_state()
        WorkoutWidgetState.clear(self.store)
        return session

    def pause_workout(self) -> Optional[WorkoutSession]:
        """Met la séance en pause (durée conservée, sans heure de fin)"""
        session = self.active_session
        if session is None:
            return None

        session.duration = self.elapsed_time
        logger.info("⏸️ Séance en pause : %s", session.title)
        self._reset_state()
        WorkoutWidgetState.clear(self.store)
        return session

    def _reset_state(self) -> None:
        self.active_session = None
        self.current_exercise_index = 0
        self.current_set_index = 0
        self.elapsed_time = 0.0
        self.workout_start_time = None
        self.cardio_session = None
        self._reset_rest()

    def _reset_rest(self) -> None:
        self.is_rest_timer_active = False
        self.rest_time_remaining = 0.0
        self.rest_duration = 0.0

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    @property
    def current_exercise(self) -> Optional[WorkoutExercise]:
        if self.active_session is None:
            return None
        exercises = self.active_session.sorted_exercises
        if self.current_exercise_index >= len(exercises):
            return None
        return exercises[self.current_exercise_index]

    @property
    def current_set(self) -> Optional[ExerciseSet]:
        exercise = self.current_exercise
        if exercise is None:
            return None
        sets = exercise.sorted_sets
        if self.current_set_index >= len(sets):
            return None
        return sets[self.current_set_index]

    @property
    def is_workout_complete(self) -> bool:
        """Tous les exercices ont été parcourus"""
        if self.active_session is None:
            return False
        return self.current_exercise_index >= len(self.active_session.exercises)

    @staticmethod
    def next_incomplete_set_index(exercise: WorkoutExercise) -> int:
        """Index de la première série non effectuée (dernière si toutes le sont)"""
        sets = exercise.sorted_sets
        for index, exercise_set in enumerate(sets):
            if not exercise_set.is_completed:
                return index
        return max(0, len(sets) - 1)

    def select_exercise(self, exercise_id: UUID) -> bool:
        """Sélectionne un exercice (ordre libre)"""
        session = self._require_session()
        for index, exercise in enumerate(session.sorted_exercises):
            if exercise.id == exercise_id:
                self.current_exercise_index = index
                self.current_set_index = self.next_incomplete_set_index(exercise)
                self.sync_widget_state()
                return True
        return False

    def move_exercise(self, from_index: int, to_index: int) -> bool:
        """Déplace un exercice et garde l'exercice courant sélectionné"""
        session = self._require_session()
        exercises = session.sorted_exercises
        if not (0 <= from_index < len(exercises) and 0 <= to_index < len(exercises)):
            return False

        exercise = exercises.pop(from_index)
        exercises.insert(to_index, exercise)
        for index, ex in enumerate(exercises):
            ex.order_index = index

        current = self.current_exercise_index
        if current == from_index:
            self.current_exercise_index = to_index
        elif from_index < current <= to_index:
            self.current_exercise_index -= 1
        elif to_index <= current < from_index:
            self.current_exercise_index += 1

        self.sync_widget_state()
        return True

    def complete_current_set(
        self,
        weight: Optional[float] = None,
        reps: Optional[int] = None,
        duration: Optional[float] = None,
        distance: Optional[float] = None,
        speed: Optional[float] = None,
        incline: Optional[float] = None
    ) -> ExerciseSet:
        """
        Valide la série courante, passe à la suivante et lance le repos

        Returns:
            La série validée
        """
        self._require_session()
        current = self.current_set
        if current is None:
            raise WorkoutStateError("Aucune série à valider")

        current.weight = weight
        current.reps = reps
        current.duration = duration
        current.distance = distance
        current.speed = speed
        current.incline = incline
        current.is_completed = True

        self._advance_to_next()

        if self.is_workout_active and not self.is_workout_complete:
            self.start_rest_timer(self.default_rest_duration)
        else:
            self.sync_widget_state()
        return current

    def _advance_to_next(self) -> None:
        """Passe à la série / l'exercice suivant en tenant compte des supersets"""
        exercises = self.active_session.sorted_exercises
        if self.current_exercise_index >= len(exercises):
            return

        exercise = exercises[self.current_exercise_index]
        group_id = exercise.superset_group_id

        if exercise.is_superset and group_id is not None:
            group = [e for e in exercises if e.superset_group_id == group_id]
            position = next(i for i, e in enumerate(group) if e.id == exercise.id)

            if position + 1 < len(group):
                # Exercice suivant du superset, même numéro de série
                self.current_exercise_index = exercises.index(group[position + 1])
                return

            self.current_set_index += 1
            if self.current_set_index >= len(group[0].sets):
                last_index = max(i for i, e in enumerate(exercises) if e.superset_group_id == group_id)
                self.current_exercise_index = last_index + 1
                self.current_set_index = 0
            else:
                self.current_exercise_index = exercises.index(group[0])
            return

        if self.current_set_index + 1 < len(exercise.sets):
            self.current_set_index += 1
        else:
            self.current_exercise_index += 1
            self.current_set_index = 0

    # ------------------------------------------------------------------
    # Minuteurs
    # ------------------------------------------------------------------

    def start_rest_timer(self, duration: Optional[float] = None) -> None:
        duration = self.default_rest_duration if duration is None else duration
        self.rest_time_remaining = duration
        self.rest_duration = duration
        self.is_rest_timer_active = True
        self.sync_widget_state()

    def add_rest_time(self, seconds: float) -> None:
        self.rest_time_remaining += seconds
        if self.is_rest_timer_active:
            self.rest_duration += seconds
            self.sync_widget_state()

    def stop_rest_timer(self) -> None:
        self._reset_rest()
        self.sync_widget_state()

    def skip_rest(self) -> None:
        self.stop_rest_timer()

    def tick(self, seconds: float = 1.0) -> None:
        """Un battement : temps écoulé, repos et cardio en cours"""
        if not self.is_workout_active:
            return
        self.elapsed_time += seconds

        if self.is_rest_timer_active:
            self.rest_time_remaining = max(0.0, self.rest_time_remaining - seconds)
            if self.rest_time_remaining <= 0:
                self.stop_rest_timer()

        if self.cardio_session is not None:
            self.cardio_session.tick(seconds)
            self.update_cardio_state(self.cardio_session)

    # ------------------------------------------------------------------
    # Cardio
    # ------------------------------------------------------------------

    def update_cardio_state(self, cardio: Optional[CardioSession]) -> None:
        """Suit une séance cardio en cours (None pour l'arrêter)"""
        if cardio is not None and cardio.phase == CardioPhase.COMPLETE:
            cardio = None
        self.cardio_session = cardio
        self.sync_widget_state()

    # ------------------------------------------------------------------
    # Historique et groupes
    # ------------------------------------------------------------------

    def previous_set_data(
        self,
        exercise_name: str,
        set_index: int,
        history: list[WorkoutSession]
    ) -> Optional[Tuple[Optional[float], Optional[int]]]:
        """
        Données de la même série lors de la dernière séance contenant l'exercice

        Returns:
            Tuple (poids, répétitions) ou None
        """
        active_id = self.active_session.id if self.active_session else None
        for session in sorted(history, key=lambda s: s.start_time, reverse=True):
            if session.id == active_id:
                continue
            for exercise in session.exercises:
                if exercise.name != exercise_name:
                    continue
                sets = exercise.sorted_sets
                if set_index < len(sets):
                    return sets[set_index].weight, sets[set_index].reps
                break
        return None

    def exercise_groups(self) -> list[list[WorkoutExercise]]:
        """Exercices regroupés par superset (un exercice seul = un groupe)"""
        if self.active_session is None:
            return []

        exercises = self.active_session.sorted_exercises
        groups = []
        seen = set()
        for exercise in exercises:
            if exercise.id in seen:
                continue
            if exercise.is_superset and exercise.superset_group_id is not None:
                group = [e for e in exercises if e.superset_group_id == exercise.superset_group_id]
            else:
                group = [exercise]
            groups.append(group)
            seen.update(e.id for e in group)
        return groups

    # ------------------------------------------------------------------
    # Affichage
    # ------------------------------------------------------------------

    @property
    def formatted_elapsed_time(self) -> str:
        return format_elapsed_time(self.elapsed_time)

    @property
    def formatted_rest_time(self) -> str:
        total = int(self.rest_time_remaining)
        return f"{total // 60}:{total % 60:02d}"

    # ------------------------------------------------------------------
    # Widget
    # ------------------------------------------------------------------

    def build_widget_state(self) -> WorkoutWidgetState:
        """Instantané courant pour le widget"""
        if self.active_session is None:
            return WorkoutWidgetState.idle()

        now = self.clock()
        exercises = self.active_session.sorted_exercises
        exercise = self.current_exercise
        index = self.current_exercise_index

        state = WorkoutWidgetState(
            is_active=True,
            workout_title=self.active_session.title,
            exercise_name=exercise.name if exercise else "Ready",
            current_set=self.current_set_index + 1,
            total_sets=len(exercise.sets) if exercise else 0,
            workout_start_date=self.workout_start_time or now,
            total_exercises=len(exercises),
            current_exercise_index=index,
        )

        if self.is_rest_timer_active:
            state.rest_end_time = now + timedelta(seconds=self.rest_time_remaining)
            state.rest_duration = self.rest_duration
            state.rest_time_remaining = self.rest_time_remaining

        if 0 < index <= len(exercises):
            previous = exercises[index - 1]
            state.previous_exercise_name = previous.name
            state.previous_sets_completed = previous.completed_sets_count
            state.previous_total_sets = len(previous.sets)
            state.previous_is_complete = not previous.has_incomplete_sets

        if index + 1 < len(exercises):
            following = exercises[index + 1]
            state.next_exercise_name = following.name
            state.next_sets_completed = following.completed_sets_count
            state.next_total_sets = len(following.sets)

        cardio = self.cardio_session
        if cardio is not None:
            fields = cardio.widget_fields()
            state.is_cardio = True
            state.cardio_mode_index = fields['mode']
            state.cardio_speed = fields['speed']
            state.cardio_incline = fields['incline']
            state.cardio_elapsed_time = fields['elapsed_time']
            state.cardio_duration = fields.get('duration', 0.0)
            state.is_paused = cardio.is_paused
            if isinstance(cardio, TimedCardioSession):
                state.cardio_time_remaining = cardio.remaining_time
                if not cardio.is_paused:
                    state.cardio_end_time = now + timedelta(seconds=cardio.remaining_time)

        return state

    def sync_widget_state(self) -> None:
        self.build_widget_state().save(self.store)

    def apply_widget_actions(self) -> Optional[WorkoutSession]:
        """
        Applique les boutons pressés sur le widget depuis la dernière synchro

        Returns:
            La séance mise en pause si le widget l'a demandé, sinon None
        """
        if self.active_session is None:
            return None
        state = WorkoutWidgetState.load(self.store)
        if not state.is_active:
            return None

        if state.pause_requested:
            return self.pause_workout()

        if self.is_rest_timer_active:
            if state.rest_end_time is None:
                logger.info("⏭️ Repos passé depuis le widget")
                self.stop_rest_timer()
            elif state.rest_duration is not None and state.rest_duration > self.rest_duration:
                self.add_rest_time(state.rest_duration - self.rest_duration)
        return None

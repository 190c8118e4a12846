"""
Générateur de plan de course (planification à rebours)

Base -> Build (+10%/semaine) -> Peak (volume max) -> Taper (réduction) -> Course
"""
import math
from datetime import date, timedelta
from typing import Optional

from models import TrainingPlan, TrainingSession, TrainingPhase, RaceDistance, RunType
from core.errors import PlanGenerationError
from utils.logger import get_logger

logger = get_logger(__name__)

# Poids de chaque type de séance dans la répartition hebdomadaire
RUN_TYPE_WEIGHTS = {
    RunType.LONG_RUN: 0.30,
    RunType.TEMPO: 0.20,
    RunType.SPEED_WORK: 0.15,
    RunType.BASE: 0.20,
    RunType.RECOVERY: 0.10,
    RunType.CROSS_TRAINING: 0.0,
    RunType.REST: 0.0,
}

TAPER_FRACTIONS = [0.75, 0.50, 0.30]
BUILD_RATE = 1.10


def weeks_until_race(start_date: date, race_date: date) -> int:
    """Nombre de semaines complètes entre le début du plan et la course (min 1)"""
    return max(1, (race_date - start_date).days // 7)


def allocate_phases(race_distance: RaceDistance, total_weeks: int) -> dict:
    """
    Répartit les semaines entre les phases, en partant de la course

    Returns:
        Dict {phase: nombre de semaines}
    """
    taper = min(race_distance.typical_taper_weeks, total_weeks - 1)
    peak = min(race_distance.peak_weeks, max(0, total_weeks - taper - 1))
    remaining = total_weeks - taper - peak
    build = max(0, remaining * 2 // 3)
    base = max(1, remaining - build)
    return {
        TrainingPhase.BASE: base,
        TrainingPhase.BUILD: build,
        TrainingPhase.PEAK: peak,
        TrainingPhase.TAPER: taper,
    }


def build_phase_schedule(phases: dict) -> list[TrainingPhase]:
    """Liste ordonnée des phases, une entrée par semaine"""
    schedule = []
    for phase in (TrainingPhase.BASE, TrainingPhase.BUILD, TrainingPhase.PEAK, TrainingPhase.TAPER):
        schedule.extend([phase] * phases[phase])
    return schedule


def weekly_mileage(
    base_mileage: float,
    phase: TrainingPhase,
    week_index: int,
    phases: dict,
    race_distance: RaceDistance
) -> float:
    """
    Kilométrage cible d'une semaine

    Args:
        base_mileage: Kilométrage hebdo actuel de l'athlète (miles)
        phase: Phase de la semaine
        week_index: Index de la semaine dans le plan (base 0)
        phases: Répartition retournée par allocate_phases
        race_distance: Distance de la course
    """
    base_weeks = phases[TrainingPhase.BASE]
    build_weeks = phases[TrainingPhase.BUILD]
    peak_weeks = phases[TrainingPhase.PEAK]
    peak_mileage = base_mileage * BUILD_RATE ** build_weeks

    if phase == TrainingPhase.BASE:
        # Maintien, avec un plancher à la moitié de la distance de course
        return max(base_mileage, race_distance.distance_in_miles * 0.5)

    if phase == TrainingPhase.BUILD:
        build_week_number = week_index - base_weeks
        return base_mileage * BUILD_RATE ** (build_week_number + 1)

    if phase == TrainingPhase.PEAK:
        return peak_mileage

    taper_week_number = week_index - base_weeks - build_weeks - peak_weeks
    if taper_week_number < len(TAPER_FRACTIONS):
        fraction = TAPER_FRACTIONS[taper_week_number]
    else:
        fraction = TAPER_FRACTIONS[-1]
    return peak_mileage * fraction


def assign_run_types(available_day_count: int, phase: TrainingPhase) -> list[RunType]:
    """Types de séances de la semaine selon la phase, déjà ordonnés"""
    if available_day_count <= 0:
        return []

    types = [RunType.LONG_RUN]

    if phase == TrainingPhase.BASE:
        if available_day_count > 2:
            types.append(RunType.RECOVERY)
        filler = RunType.BASE

    elif phase == TrainingPhase.BUILD:
        if available_day_count > 1:
            types.append(RunType.SPEED_WORK)
        if available_day_count > 3:
            types.append(RunType.RECOVERY)
        filler = RunType.BASE

    elif phase == TrainingPhase.PEAK:
        if available_day_count > 1:
            types.append(RunType.SPEED_WORK)
        if available_day_count > 2:
            types.append(RunType.TEMPO)
        if available_day_count > 4:
            types.append(RunType.RECOVERY)
        filler = RunType.BASE

    else:  # TAPER
        if available_day_count > 2:
            types.append(RunType.SPEED_WORK)
        filler = RunType.RECOVERY

    while len(types) < available_day_count:
        types.append(filler)

    return reorder_for_week(types)


def reorder_for_week(types: list[RunType]) -> list[RunType]:
    """
    Place la sortie longue en fin de semaine, le fractionné en milieu de
    semaine et le tempo juste après
    """
    count = len(types)
    result = [RunType.BASE] * count
    placed = set()

    long_run_index = max(0, count - 2)
    speed_index = 2 if count > 3 else (1 if count > 1 else 0)
    tempo_index = 3 if count > 3 else (2 if count > 2 else 0)

    def free_index() -> int:
        for i in range(count):
            if i not in placed:
                return i
        return 0

    if RunType.LONG_RUN in types:
        result[long_run_index] = RunType.LONG_RUN
        placed.add(long_run_index)

    for run_type, index in ((RunType.SPEED_WORK, speed_index), (RunType.TEMPO, tempo_index)):
        if run_type in types:
            idx = free_index() if index in placed else index
            result[idx] = run_type
            placed.add(idx)

    remaining = iter(
        t for t in types
        if t not in (RunType.LONG_RUN, RunType.SPEED_WORK, RunType.TEMPO)
    )
    for i in range(count):
        if i not in placed:
            result[i] = next(remaining, RunType.BASE)

    return result


def round_to_quarter(miles: float) -> float:
    """Arrondi au quart de mile le plus proche"""
    return math.floor(miles * 4 + 0.5) / 4


def distribute_mileage(
    weekly_miles: float,
    assignments: list[RunType],
    long_run_cap: float
) -> list[float]:
    """
    Répartit le kilométrage hebdomadaire entre les séances

    La sortie longue est plafonnée ; l'excédent est reporté sur les sorties
    base/récupération. Distances arrondies au quart de mile.
    """
    if not assignments:
        return []

    weights = [RUN_TYPE_WEIGHTS[t] for t in assignments]
    total_weight = sum(weights)
    if total_weight <= 0:
        return [0.0] * len(assignments)

    distances = [w / total_weight * weekly_miles for w in weights]

    easy_indices = [
        i for i, t in enumerate(assignments)
        if t in (RunType.BASE, RunType.RECOVERY)
    ]
    for i, run_type in enumerate(assignments):
        if run_type == RunType.LONG_RUN and distances[i] > long_run_cap:
            excess = distances[i] - long_run_cap
            distances[i] = long_run_cap
            if easy_indices:
                add_on = excess / len(easy_indices)
                for idx in easy_indices:
                    distances[idx] += add_on

    distances = [round_to_quarter(d) for d in distances]

    return [
        d if run_type.counts_as_mileage else 0.0
        for d, run_type in zip(distances, assignments)
    ]


def generate_week_sessions(
    week_start: date,
    weekly_miles: float,
    phase: TrainingPhase,
    race_distance: RaceDistance,
    rest_days: set[int]
) -> list[TrainingSession]:
    """Génère les 7 jours d'une semaine (jours de repos inclus)"""
    days = [week_start + timedelta(days=offset) for offset in range(7)]
    available = [d for d in days if d.isoweekday() not in rest_days]

    assignments = assign_run_types(len(available), phase)
    distances = distribute_mileage(
        weekly_miles,
        assignments,
        long_run_cap=race_distance.distance_in_miles * race_distance.long_run_cap_fraction
    )
    planned = {
        day: (run_type, distance)
        for day, run_type, distance in zip(available, assignments, distances)
    }

    sessions = []
    for day in days:
        run_type, distance = planned.get(day, (RunType.REST, 0.0))
        sessions.append(TrainingSession(date=day, run_type=run_type, target_distance=distance))
    return sessions


def generate_sessions(plan: TrainingPlan) -> list[TrainingSession]:
    """
    Génère toutes les séances d'un plan

    Returns:
        Séances jour par jour, vide si moins de 2 semaines avant la course
    """
    total_weeks = weeks_until_race(plan.start_date, plan.race_date)
    if total_weeks < 2:
        return []

    phases = allocate_phases(plan.race_distance, total_weeks)
    schedule = build_phase_schedule(phases)
    rest_days = set(plan.rest_days)

    sessions = []
    for week_index, phase in enumerate(schedule):
        week_start = plan.start_date + timedelta(weeks=week_index)
        miles = weekly_mileage(plan.weekly_mileage, phase, week_index, phases, plan.race_distance)
        sessions.extend(generate_week_sessions(week_start, miles, phase, plan.race_distance, rest_days))

    return sessions


class TrainingPlanGenerator:
    """
    Génère un plan de course complet à partir de la forme actuelle

    Prérequis:
    - Au moins 2 semaines avant la course
    - Au moins un jour d'entraînement par semaine
    """

    def __init__(
        self,
        race_distance: RaceDistance,
        race_date: date,
        weekly_mileage: float,
        longest_recent_run: float,
        start_date: Optional[date] = None,
        rest_days: Optional[list[int]] = None
    ):
        self.race_distance = race_distance
        self.race_date = race_date
        self.start_date = start_date or date.today()
        self.weekly_mileage = weekly_mileage
        self.longest_recent_run = longest_recent_run
        self.rest_days = sorted(set(rest_days or []))

        if self.race_date <= self.start_date:
            raise PlanGenerationError("La date de course doit être après le début du plan")
        if self.weekly_mileage < 0 or self.longest_recent_run < 0:
            raise PlanGenerationError("Le kilométrage ne peut pas être négatif")
        if any(day < 1 or day > 7 for day in self.rest_days):
            raise PlanGenerationError("Jours de repos invalides (1=lundi ... 7=dimanche)")
        if len(self.rest_days) >= 7:
            raise PlanGenerationError("Il faut au moins un jour d'entraînement par semaine")

        self.duration_weeks = weeks_until_race(self.start_date, self.race_date)
        if self.duration_weeks < 2:
            raise PlanGenerationError("Le plan doit durer au moins 2 semaines")
        if self.duration_weeks < self.race_distance.minimum_weeks_needed:
            logger.warning(
                "Plan de %d semaines pour %s (recommandé: %d minimum)",
                self.duration_weeks,
                self.race_distance.display_name,
                self.race_distance.minimum_weeks_needed
            )

    def generate_plan(self) -> TrainingPlan:
        """Génère le plan et ses séances"""
        plan = TrainingPlan(
            race_distance=self.race_distance,
            race_date=self.race_date,
            start_date=self.start_date,
            weekly_mileage=self.weekly_mileage,
            longest_recent_run=self.longest_recent_run,
            rest_days=self.rest_days
        )
        plan.sessions = generate_sessions(plan)

        logger.info(
            "Plan %s généré: %d semaines, %d séances, %.1f miles",
            self.race_distance.display_name,
            self.duration_weeks,
            len(plan.sessions),
            plan.get_total_volume()
        )
        return plan


def generate_race_plan(
    race_distance: RaceDistance,
    race_date: date,
    weekly_mileage: float,
    longest_recent_run: float,
    start_date: Optional[date] = None,
    rest_days: Optional[list[int]] = None
) -> TrainingPlan:
    """
    Fonction helper pour générer un plan de course

    Args:
        race_distance: Distance de la course
        race_date: Date de la course
        weekly_mileage: Kilométrage hebdo actuel (miles)
        longest_recent_run: Plus longue sortie récente (miles)
        start_date: Début du plan (aujourd'hui par défaut)
        rest_days: Jours de repos (1=lundi, 7=dimanche)

    Returns:
        TrainingPlan complet
    """
    generator = TrainingPlanGenerator(
        race_distance=race_distance,
        race_date=race_date,
        weekly_mileage=weekly_mileage,
        longest_recent_run=longest_recent_run,
        start_date=start_date,
        rest_days=rest_days
    )
    return generator.generate_plan()

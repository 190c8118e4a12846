"""Lecture du plan de course semaine par semaine (séance du jour, bilans hebdomadaires)."""

from datetime import date, timedelta
from typing import Optional
from models.training_plan import TrainingPlan
from models.session import TrainingSession


def get_session_for_date(plan: TrainingPlan, target_date: date) -> Optional[TrainingSession]:
    """
    Séance prévue à une date (repos compris).

    Args:
        plan: Le plan d'entraînement complet
        target_date: Jour recherché

    Returns:
        TrainingSession si une séance est prévue ce jour, None sinon
    """
    return plan.todays_session(target_date)


def get_current_week_number(plan: TrainingPlan, target_date: date) -> Optional[int]:
    """
    Retourne le numéro de semaine (1-indexed) pour une date donnée.

    Returns:
        Numéro de semaine, ou None si hors plan
    """
    days_since_start = (target_date - plan.start_date).days

    if days_since_start < 0 or target_date > plan.race_date:
        return None

    return (days_since_start // 7) + 1


def get_week_sessions(plan: TrainingPlan, week_number: int) -> list[TrainingSession]:
    """Séances de la semaine N du plan (7 jours à partir du début)"""
    week_start = plan.start_date + timedelta(weeks=week_number - 1)
    week_end = week_start + timedelta(days=7)
    return [s for s in plan.sorted_sessions if week_start <= s.date < week_end]


def get_week_summary(plan: TrainingPlan, week_number: int) -> dict:
    """
    Bilan d'une semaine : volume prévu et réalisé, sorties, sortie longue.

    Args:
        plan: Le plan d'entraînement
        week_number: Numéro de semaine (1-indexed)

    Returns:
        Dictionnaire de statistiques, vide si la semaine est hors plan
    """
    if week_number < 1 or week_number > plan.total_weeks:
        return {}

    sessions = get_week_sessions(plan, week_number)
    running = [s for s in sessions if s.run_type.counts_as_mileage]

    return {
        'week_number': week_number,
        'planned_miles': round(sum(s.target_distance for s in running), 2),
        'completed_miles': round(sum(s.actual_distance or 0.0 for s in running if s.is_completed), 2),
        'num_sessions': len(sessions),
        'num_runs': len(running),
        'completed_runs': sum(1 for s in running if s.is_completed),
        'long_run_miles': max((s.target_distance for s in running), default=0.0),
    }

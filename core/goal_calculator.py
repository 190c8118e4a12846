"""
Calculateur d'objectifs : besoin quotidien, statut et détection des
rythmes irréalistes
"""
import math
from datetime import date, timedelta
from typing import Optional

from models import DailyPlan, GoalFrequency, GoalStatus


class GoalCalculator:
    """
    Transforme un suivi passif en conseil actif

    - Écart restant (objectif - réalisé)
    - Rythme initial vs rythme recalculé
    - Statut avec une tolérance de 5%
    - Projection de la date d'atteinte
    """

    ON_TRACK_TOLERANCE = 0.05
    UNREALISTIC_THRESHOLD = 1.5
    MAX_REALISTIC_STUDY_HOURS = 8.0
    BASELINE_SPIKE_RATIO = 2.0

    @classmethod
    def calculate_daily_plan(
        cls,
        target_amount: float,
        current_amount: float,
        deadline: date,
        start_date: date,
        frequency: GoalFrequency = GoalFrequency.DAILY,
        historical_average: Optional[float] = None,
        safe_threshold: Optional[float] = None,
        today: Optional[date] = None
    ) -> DailyPlan:
        """
        Calcule le plan quotidien d'un objectif

        Args:
            target_amount: Cible (ex: 2000 $, 100 heures)
            current_amount: Progression actuelle
            deadline: Échéance
            start_date: Création de l'objectif
            frequency: Calcul journalier ou hebdomadaire
            historical_average: Moyenne quotidienne historique (optionnel)
            safe_threshold: Rythme maximal raisonnable (optionnel)
            today: Date du jour (injectable)

        Returns:
            DailyPlan
        """
        today = today or date.today()
        remaining = target_amount - current_amount

        if remaining <= 0:
            return DailyPlan.completed()

        days_remaining = (deadline - today).days
        if days_remaining <= 0:
            return DailyPlan.expired(remaining)

        total_days = max(float((deadline - start_date).days), 1.0)
        days_elapsed = max((today - start_date).days, 0)

        baseline_rate = target_amount / total_days
        adjusted_rate = remaining / days_remaining
        amount_needed_today = adjusted_rate * frequency.days_per_period

        expected = days_elapsed / total_days * target_amount
        progress_percentage = current_amount / target_amount if target_amount else 0.0
        deviation = current_amount - expected

        status = cls.determine_status(expected, current_amount, target_amount)
        is_unrealistic = cls.check_if_unrealistic(
            adjusted_rate, baseline_rate, historical_average, safe_threshold
        )

        return DailyPlan(
            amount_needed_today=amount_needed_today,
            status=status,
            baseline_rate=baseline_rate,
            adjusted_rate=adjusted_rate,
            days_remaining=days_remaining,
            projected_completion=cls.projected_completion(
                current_amount, target_amount, days_elapsed, today
            ),
            is_unrealistic=is_unrealistic,
            warning_message=cls.warning_message(
                status, adjusted_rate, baseline_rate, is_unrealistic, days_remaining
            ),
            progress_percentage=progress_percentage,
            deviation_from_expected=deviation
        )

    @classmethod
    def determine_status(cls, expected_progress: float, actual_progress: float, target_amount: float) -> GoalStatus:
        if actual_progress >= target_amount:
            return GoalStatus.COMPLETED

        tolerance = target_amount * cls.ON_TRACK_TOLERANCE
        deviation = actual_progress - expected_progress

        if deviation > tolerance:
            return GoalStatus.AHEAD
        if deviation < -tolerance * 2:
            return GoalStatus.BEHIND
        return GoalStatus.ON_TRACK

    @classmethod
    def check_if_unrealistic(
        cls,
        required_rate: float,
        baseline_rate: float,
        historical_average: Optional[float] = None,
        safe_threshold: Optional[float] = None
    ) -> bool:
        """Rythme requis hors de portée (historique, seuil ou emballement)"""
        if historical_average and historical_average > 0:
            if required_rate > historical_average * cls.UNREALISTIC_THRESHOLD:
                return True

        if safe_threshold and safe_threshold > 0:
            if required_rate > safe_threshold:
                return True

        return baseline_rate > 0 and required_rate > baseline_rate * cls.BASELINE_SPIKE_RATIO

    @staticmethod
    def projected_completion(
        current_amount: float,
        target_amount: float,
        days_elapsed: int,
        today: date
    ) -> Optional[date]:
        """Date d'atteinte estimée au rythme actuel"""
        if days_elapsed <= 0 or current_amount <= 0:
            return None
        current_rate = current_amount / days_elapsed
        days_needed = (target_amount - current_amount) / current_rate
        try:
            return today + timedelta(days=math.ceil(days_needed))
        except OverflowError:
            return None

    @staticmethod
    def warning_message(
        status: GoalStatus,
        adjusted_rate: float,
        baseline_rate: float,
        is_unrealistic: bool,
        days_remaining: int
    ) -> Optional[str]:
        if status == GoalStatus.COMPLETED:
            return None

        if is_unrealistic:
            multiplier = adjusted_rate / max(baseline_rate, 0.001)
            return f"Required rate is {multiplier:.1f}x higher than planned. Consider extending your deadline."

        if status == GoalStatus.BEHIND:
            if days_remaining <= 7:
                return f"Only {days_remaining} days left. You need to increase your daily effort."
            return "You're behind schedule. Increase daily progress to catch up."

        if status == GoalStatus.AHEAD:
            return "Great progress! You can maintain this pace or take it easy."

        return None

    @staticmethod
    def expected_progress(
        target_amount: float,
        start_date: date,
        deadline: date,
        today: Optional[date] = None
    ) -> float:
        """Progression attendue aujourd'hui (interpolation linéaire, bornée)"""
        today = today or date.today()
        total_days = max((deadline - start_date).days, 1)
        days_elapsed = (today - start_date).days
        progress = days_elapsed / total_days * target_amount
        return max(0.0, min(progress, target_amount))

    @classmethod
    def calculate_study_plan(
        cls,
        total_hours_needed: float,
        hours_completed: float,
        deadline: date,
        start_date: date,
        historical_daily_average: float = 2.0,
        today: Optional[date] = None
    ) -> DailyPlan:
        """Objectif d'étude : plafond de 8 heures par jour"""
        return cls.calculate_daily_plan(
            target_amount=total_hours_needed,
            current_amount=hours_completed,
            deadline=deadline,
            start_date=start_date,
            historical_average=historical_daily_average,
            safe_threshold=cls.MAX_REALISTIC_STUDY_HOURS,
            today=today
        )

    @classmethod
    def calculate_financial_plan(
        cls,
        target_savings: float,
        current_savings: float,
        deadline: date,
        start_date: date,
        monthly_income: Optional[float] = None,
        today: Optional[date] = None
    ) -> DailyPlan:
        """Objectif d'épargne : seuil à 5% du revenu mensuel réparti sur 30 jours"""
        safe_threshold = monthly_income * 0.05 / 30.0 if monthly_income is not None else None
        return cls.calculate_daily_plan(
            target_amount=target_savings,
            current_amount=current_savings,
            deadline=deadline,
            start_date=start_date,
            safe_threshold=safe_threshold,
            today=today
        )

"""Utilitaires pour sauvegarder et charger les plans d'entraînement."""

from pathlib import Path
from typing import Optional
from uuid import UUID

from pydantic import ValidationError

from models.training_plan import TrainingPlan
from config.settings import PLANS_DIR
from utils.logger import get_logger

logger = get_logger(__name__)


def _plans_dir(directory: Optional[Path] = None) -> Path:
    path = Path(directory) if directory else PLANS_DIR
    path.mkdir(parents=True, exist_ok=True)
    return path


def plan_path(plan_id: UUID, directory: Optional[Path] = None) -> Path:
    return _plans_dir(directory) / f"plan_{plan_id}.json"


def save_plan(plan: TrainingPlan, directory: Optional[Path] = None) -> Path:
    """
    Sauvegarde le plan d'entraînement au format JSON.

    Args:
        plan: Plan d'entraînement à sauvegarder
        directory: Dossier des plans (PLANS_DIR par défaut)

    Returns:
        Chemin du fichier écrit
    """
    path = plan_path(plan.id, directory)
    path.write_text(plan.model_dump_json(indent=2), encoding='utf-8')
    logger.debug("💾 Plan %s sauvegardé dans %s", plan.id, path)
    return path


def _read_plan(path: Path) -> Optional[TrainingPlan]:
    try:
        return TrainingPlan.model_validate_json(path.read_text(encoding='utf-8'))
    except (OSError, ValidationError) as e:
        logger.error("❌ Erreur lors du chargement du plan %s : %s", path.name, e)
        return None


def load_plan(plan_id: UUID, directory: Optional[Path] = None) -> Optional[TrainingPlan]:
    """
    Charge un plan d'entraînement.

    Returns:
        Plan d'entraînement ou None si le fichier n'existe pas
    """
    path = plan_path(plan_id, directory)
    if not path.exists():
        return None
    return _read_plan(path)


def list_plans(directory: Optional[Path] = None) -> list[TrainingPlan]:
    """Tous les plans lisibles, du plus récent au plus ancien"""
    plans = []
    for path in sorted(_plans_dir(directory).glob("plan_*.json")):
        plan = _read_plan(path)
        if plan is not None:
            plans.append(plan)
    return sorted(plans, key=lambda p: p.created_at, reverse=True)


def load_active_plan(directory: Optional[Path] = None) -> Optional[TrainingPlan]:
    """Plan actif le plus récent (actif et non terminé)"""
    for plan in list_plans(directory):
        if plan.is_active and not plan.is_completed:
            return plan
    return None


def delete_plan(plan_id: UUID, directory: Optional[Path] = None) -> bool:
    path = plan_path(plan_id, directory)
    if not path.exists():
        return False
    path.unlink()
    logger.info("🗑️ Plan %s supprimé", plan_id)
    return True


def get_or_create_plan(generator_func, directory: Optional[Path] = None, force_new: bool = False, **kwargs) -> TrainingPlan:
    """
    Charge le plan actif ou en génère un nouveau.

    Args:
        generator_func: Fonction pour générer un nouveau plan
        directory: Dossier des plans
        force_new: Si True, génère un nouveau plan même si un plan actif existe
        **kwargs: Arguments à passer à generator_func

    Returns:
        Plan d'entraînement
    """
    if not force_new:
        plan = load_active_plan(directory)
        if plan:
            return plan

    plan = generator_func(**kwargs)
    save_plan(plan, directory)
    return plan

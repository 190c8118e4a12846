"""Configuration du logging applicatif."""
import logging

from config.settings import LOG_LEVEL


def get_logger(name: str = "lifeflow") -> logging.Logger:
    """
    Retourne un logger configuré (console)

    Args:
        name: Nom du logger (généralement le module)

    Returns:
        Logger prêt à l'emploi
    """
    logger = logging.getLogger(name)
    logger.setLevel(LOG_LEVEL.upper())

    # Un seul handler par logger, même si get_logger est appelé plusieurs fois
    if not logger.handlers:
        console = logging.StreamHandler()
        console.setFormatter(logging.Formatter(
            "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s",
            "%Y-%m-%d %H:%M:%S"
        ))
        logger.addHandler(console)

    return logger

"""Logging wiring shared by the API and the background sweeper."""
import logging

FORMAT = '[SERVER] %(asctime)s %(levelname)s %(name)s: %(message)s'


def configure(level: str = 'INFO') -> None:
    logging.basicConfig(level=level.upper(), format=FORMAT)


def get_logger(name: str):
    return logging.getLogger(name)

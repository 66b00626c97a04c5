import logging


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    logging.disable(logging.NOTSET)
    logging.basicConfig(format="{message}", style="{")
    root_logger = logging.getLogger()
    if debug:
        root_logger.setLevel(logging.DEBUG)
    elif verbose:
        root_logger.setLevel(logging.INFO)
    else:
        root_logger.setLevel(logging.WARNING)

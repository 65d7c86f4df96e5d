import logging

formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')


def fileLogger(file_name, logger_name=None, level=logging.WARNING):
    # create logger writing to file_name
    logger = logging.getLogger(logger_name)
    fh = logging.FileHandler(file_name)
    fh.setLevel(level)
    fh.setFormatter(formatter)
    logger.addHandler(fh)
    if logger.level == logging.NOTSET or logger.level > level:
        logger.setLevel(level)
    return logger


def consoleLogger(logger_name=None, level=logging.WARNING):
    # create console handler, nothing below level gets through
    logger = logging.getLogger(logger_name)
    ch = logging.StreamHandler()
    ch.setLevel(level)
    ch.setFormatter(formatter)
    logger.addHandler(ch)
    if logger.level == logging.NOTSET or logger.level > level:
        logger.setLevel(level)
    return logger

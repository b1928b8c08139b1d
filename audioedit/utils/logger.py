import logging
import sys

def setup_logger():
    logger = logging.getLogger("audioedit")
    logger.setLevel(logging.DEBUG)
    
    # Console Handler
    ch = logging.StreamHandler(sys.stdout)
    ch.setLevel(logging.INFO)
    
    # Formatter
    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    ch.setFormatter(formatter)
    
    if not logger.handlers:
        logger.addHandler(ch)
        
    return logger

def set_verbose(verbose=True):
    """Switches the console handler between INFO and DEBUG."""
    for handler in logger.handlers:
        handler.setLevel(logging.DEBUG if verbose else logging.INFO)

logger = setup_logger()

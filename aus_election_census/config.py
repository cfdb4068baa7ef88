import os
from pathlib import Path

from dotenv import load_dotenv
from loguru import logger

# Load environment variables from .env file if it exists
load_dotenv()

# Paths
PROJ_ROOT = Path(__file__).resolve().parents[1]
logger.info(f"PROJ_ROOT path is: {PROJ_ROOT}")

DATA_DIR = Path(os.getenv("AEC_DATA_DIR", PROJ_ROOT / "data"))
RAW_DATA_DIR = DATA_DIR / "raw"
PROCESSED_DATA_DIR = DATA_DIR / "processed"
EXTERNAL_DATA_DIR = DATA_DIR / "external"

REPORTS_DIR = PROJ_ROOT / "reports"
FIGURES_DIR = REPORTS_DIR / "figures"
MODEL_DIR = REPORTS_DIR / "model"

WAREHOUSE_PATH = Path(os.getenv("AEC_WAREHOUSE", PROCESSED_DATA_DIR / "warehouse.duckdb"))

# Electorate boundaries are optional; only the choropleth needs them.
BOUNDARIES_FILE = EXTERNAL_DATA_DIR / "electorates.gpkg"

# Federal elections covered by the snapshot
ELECTION_YEARS = [2001, 2004, 2007, 2010, 2013, 2016]

# Census collected nearest each election; 2001 and 2016 coincide
CENSUS_YEAR_FOR_ELECTION = {
    2001: 2001,
    2004: 2006,
    2007: 2006,
    2010: 2011,
    2013: 2011,
    2016: 2016,
}

# AEC tally-room event ids; 2001 predates the results.aec.gov.au downloads
AEC_EVENT_IDS = {
    2004: 12246,
    2007: 13745,
    2010: 15508,
    2013: 17496,
    2016: 20499,
}
AEC_BASE_URL = os.getenv("AEC_BASE_URL", "https://results.aec.gov.au")

STATES = ["NSW", "VIC", "QLD", "WA", "SA", "TAS", "ACT", "NT"]

PARTY_COLOURS = {
    "ALP": "#DE3533",
    "LNP": "#1C4F9C",
    "GRN": "#10C25B",
    "KAP": "#B50204",
    "PUP": "#FFED00",
    "XEN": "#FF6300",
    "IND": "#808080",
    "OTHER": "#BBBBBB",
}

# If tqdm is installed, configure loguru with tqdm.write
# https://github.com/Delgan/loguru/issues/135
try:
    from tqdm import tqdm

    logger.remove(0)
    logger.add(lambda msg: tqdm.write(msg, end=""), colorize=True)
except ModuleNotFoundError:
    pass

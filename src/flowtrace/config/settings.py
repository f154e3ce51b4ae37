import os
from dotenv import load_dotenv
load_dotenv()
# ---- Etherscan (v2 unified API, one key for every chain) ----
ETHERSCAN_API_KEY = os.environ.get("ETHERSCAN_API_KEY")
ETHERSCAN_BASE_URL = os.environ.get("ETHERSCAN_BASE_URL", "https://api.etherscan.io/v2/api")

ETHERSCAN_REQUESTS_PER_SEC = float(os.environ.get("ETHERSCAN_REQUESTS_PER_SEC", "4.0"))
ETHERSCAN_TIMEOUT_SEC = int(os.environ.get("ETHERSCAN_TIMEOUT_SEC", "15"))
ETHERSCAN_MAX_RETRIES = int(os.environ.get("ETHERSCAN_MAX_RETRIES", "3"))

# ---- Flow tracing bounds ----
FLOW_MIN_HOPS = 1
FLOW_MAX_HOPS = 5
FLOW_DEFAULT_HOPS = 3
FLOW_MAX_PATHS = 10
FLOW_TX_FETCH_LIMIT = 50        # most recent txs per address
FLOW_DEFAULT_CHAIN = "ethereum"

FLOW_FETCH_WORKERS = int(os.environ.get("FLOW_FETCH_WORKERS", "1"))   # 1 = sequential
FLOW_TRACE_TIMEOUT_SEC = float(os.environ.get("FLOW_TRACE_TIMEOUT_SEC", "60"))

# ---- Chains ----
DEFAULT_CHAIN_ID = 1            # Ethereum mainnet

CHAIN_IDS = {
    "ethereum": 1,
    "arbitrum": 42161,
    "base": 8453,
    "optimism": 10,
    "polygon": 137,
    "bsc": 56,
}

EXPLORER_TX_URLS = {
    1: "https://etherscan.io/tx/",
    42161: "https://arbiscan.io/tx/",
    8453: "https://basescan.org/tx/",
    10: "https://optimistic.etherscan.io/tx/",
    137: "https://polygonscan.com/tx/",
    56: "https://bscscan.com/tx/",
}

# ---- API / logging ----
API_HOST = os.environ.get("API_HOST", "0.0.0.0")
API_PORT = int(os.environ.get("API_PORT", "8000"))
LOG_LEVEL = os.environ.get("FLOWTRACE_LOG_LEVEL", "INFO")

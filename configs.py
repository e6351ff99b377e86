# ---------------------------------- Extra ----------------------------------
SHUFFLE_WALLETS = False  # True/False Shuffle wallets before use
ACCOUNT_SWITCH_DELAY = 3  # seconds between accounts

# --------------------------------- General ---------------------------------
MAX_RETRY_ATTEMPTS = 3  # Number of retry attempts for failed requests
RETRY_SLEEP_RANGE = (5, 5)  # (min, max) in seconds
PERCENT_TRANSACTION = (1, 5)  # (min, max) share of the balance per transaction, in percent
CYCLE_SLEEP_RANGE = (30, 60)  # (min, max) in seconds between transactions and cycles
MONAD_RPCS = [
    "https://testnet-rpc.monad.xyz",
    "https://testnet-rpc.monorail.xyz",
    "https://monad-testnet.drpc.org",
]

# --------------------------------- Deploy ---------------------------------
DEPLOY_WALLETS: list[int] = []  # line numbers from private_keys.txt, empty = all wallets
SOLC_VERSION = "0.8.19"
DEPLOY_GAS_RANGE = (150_000, 250_000)  # fallback gas limit when estimation fails

# --------------------------------- Send ---------------------------------
AMOUNT_SEND_FEE = (0.01, 0.05)  # (min, max) MON sent from the main wallet

# --------------------------------- Faucet ---------------------------------
FAUCET_COOLDOWN_HOURS = 12

# --------------------------------- Staking ---------------------------------
APRIORI_CLAIM_WAIT = 660  # seconds before an unstake request becomes claimable

# --------------------------------- Uniswap ---------------------------------
UNISWAP_SWAP_RANGE = (0.0001, 0.01)  # (min, max) MON per token swap
UNISWAP_PAUSE_RANGE = (1, 3)  # (min, max) in seconds between swaps

# -------------------------- Route --------------------------
SHUFFLE_ROUTE = False
ROUTE_TASK = [
    'rubic',
    'izumi',
    'beanswap',
    'magma',
    'apriori',
    'monorail',
    'kintsu',
    'uniswap',
]

"""
Modules for route generation:
    - rubic                    Wrap/unwrap MON cycles back to back
    - izumi                    Wrap/unwrap MON cycles with pauses
    - beanswap                 Random pair swaps on Bean Exchange
    - magma                    Stake/unstake MON on Magma
    - apriori                  Stake/unstake/claim MON on aPriori
    - monorail                 Random pair swaps through the Monorail aggregator
    - kintsu                   Stake/unstake MON on Kintsu
    - uniswap                  Swap MON into tokens and back on Uniswap
    - ambient                  MON/USDT swaps on Ambient
    - deploy                   Deploy a random test contract
    - faucet                   Claim MON from the testnet faucet
    - send                     Send MON from the main wallet
"""

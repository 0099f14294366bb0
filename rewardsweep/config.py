"""Network and program configuration for the reward sweep pipeline."""

SOLANA_RPC_URLS = {
    "mainnet-beta": "https://api.mainnet-beta.solana.com",
    "testnet": "https://api.testnet.solana.com",
    "devnet": "https://api.devnet.solana.com",
    "localnet": "http://localhost:8899",
}

# Fee venues: Pump.fun bonding curve and the PumpSwap AMM.
PUMP_PROGRAM_ID = "6EF8rrecthR5Dkzon8Nwu78hRvfCKubJ14M5uBEwF6P"
PUMP_AMM_PROGRAM_ID = "pAMMBay6oceH9fJKBRHGP5D4bD4sWpmSwMn52FMfXEA"

LAMPORTS_PER_SOL = 1_000_000_000

DEFAULT_COMMITMENT = "confirmed"
DEFAULT_FEE_BUFFER_LAMPORTS = 5000
DEFAULT_HOLDER_COUNT = 20

DEFAULT_IDL_PATH = "target/idl/reward_pool.json"
DEFAULT_DEVELOPER_KEYPAIR_PATH = "./keys/pump-developer.json"
DEFAULT_POOL_OWNER_KEYPAIR_PATH = "./keys/pool-owner.json"

"""API path templates; ``%s`` placeholders are filled positionally."""

PATH_PING = "/ping"

PATH_OAUTH2_TOKEN = "/oauth2/token"
PATH_OAUTH2_REVOKE = "/oauth2/revoke"

PATH_ACCOUNTS = "/accounts"
PATH_ACCOUNT = "/accounts/%s"

PATH_CAPABILITIES = "/accounts/%s/capabilities"
PATH_CAPABILITY = "/accounts/%s/capabilities/%s"

PATH_FILES = "/accounts/%s/files"
PATH_FILE = "/accounts/%s/files/%s"

PATH_PAYMENT_METHODS = "/accounts/%s/payment-methods"

PATH_CARDS = "/accounts/%s/cards"
PATH_CARD = "/accounts/%s/cards/%s"

PATH_BANK_ACCOUNTS = "/accounts/%s/bank-accounts"
PATH_BANK_ACCOUNT = "/accounts/%s/bank-accounts/%s"
PATH_BANK_ACCOUNT_MICRO_DEPOSITS = "/accounts/%s/bank-accounts/%s/microdeposits"

PATH_WALLETS = "/accounts/%s/wallets"
PATH_WALLET = "/accounts/%s/wallets/%s"
PATH_WALLET_TRANSACTIONS = "/accounts/%s/wallets/%s/transactions"
PATH_WALLET_TRANSACTION = "/accounts/%s/wallets/%s/transactions/%s"

PATH_APPLE_PAY = "/accounts/%s/apple-pay"
PATH_APPLE_PAY_DOMAINS = "/accounts/%s/apple-pay/domains"
PATH_APPLE_PAY_SESSIONS = "/accounts/%s/apple-pay/sessions"
PATH_APPLE_PAY_TOKENS = "/accounts/%s/apple-pay/tokens"

PATH_SCHEDULES = "/accounts/%s/schedules"
PATH_SCHEDULE = "/accounts/%s/schedules/%s"

PATH_INSTITUTIONS = "/institutions/%s/search"

PATH_TRANSFER_OPTIONS = "/transfer-options"

PATH_TRANSFERS = "/transfers"
PATH_TRANSFER = "/transfers/%s"
PATH_TRANSFER_REVERSALS = "/transfers/%s/reversals"
PATH_REFUNDS = "/transfers/%s/refunds"
PATH_REFUND = "/transfers/%s/refunds/%s"

PATH_DISPUTES = "/disputes"
PATH_DISPUTE = "/disputes/%s"

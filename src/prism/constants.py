from __future__ import annotations

# contract account names
TOKEN_CONTRACT   = "cyber.token"
VESTING_CONTRACT = "gls.vesting"
CONTROL_CONTRACT = "gls.ctrl"
SOCIAL_CONTRACT  = "gls.social"

# currencies and their fixed scales
LIQUID_SYMBOL = "GOLOS"
LIQUID_DECS   = 3
SHARE_SYMBOL  = "GESTS"
SHARE_DECS    = 6

GLS_COMMUNITY = "gls"
ALL_CURRENCIES = "all"

# document store collections
TRANSFERS        = "transfers"
BALANCES         = "balances"
TOKENS           = "tokens"
VESTING_STATS    = "vestingstats"
VESTING_BALANCES = "vestingbalances"
VESTING_CHANGES  = "vestingchanges"
USER_METAS       = "usermetas"
WITHDRAWALS      = "withdrawals"
DELEGATE_VESTING_PROPOSALS = "delegatevestingproposals"

from fastapi import APIRouter, Depends

from udao_mining.api.deps import get_dispatcher
from udao_mining.api.models import AccountBalance, ErrorResponse, LastRewardTime, SupplyInfo, TierReward
from udao_mining.runtime.dispatcher import ActionDispatcher
from udao_mining.services.reward_scheduler import reward_for_tier

router = APIRouter(prefix="/v1", responses={404: {"model": ErrorResponse}})


@router.get("/tokens/{symbol_code}/stats", response_model=SupplyInfo)
async def get_token_stats(symbol_code: str, dispatcher: ActionDispatcher = Depends(get_dispatcher)):
    supply = dispatcher.registry.query_supply(symbol_code)
    return SupplyInfo(**supply.to_dict())


@router.get("/tokens/{symbol_code}/last-reward", response_model=LastRewardTime)
async def get_last_reward_time(symbol_code: str, dispatcher: ActionDispatcher = Depends(get_dispatcher)):
    return LastRewardTime(
        symbol_code=symbol_code.upper(),
        last_reward_at=dispatcher.registry.query_last_reward_time(symbol_code),
    )


@router.get("/tokens/{symbol_code}/reward", response_model=TierReward)
async def get_tier_reward(symbol_code: str, dispatcher: ActionDispatcher = Depends(get_dispatcher)):
    supply = dispatcher.registry.query_supply(symbol_code)
    return TierReward(
        symbol_code=supply.symbol_code,
        supply=str(supply.supply),
        reward=str(reward_for_tier(supply.supply)),
    )


@router.get("/accounts/{account}/balances/{symbol_code}", response_model=AccountBalance)
async def get_account_balance(
    account: str,
    symbol_code: str,
    dispatcher: ActionDispatcher = Depends(get_dispatcher),
):
    balance = dispatcher.registry.query_balance(account, symbol_code)
    return AccountBalance(contract=dispatcher.contract, account=account, balance=str(balance))

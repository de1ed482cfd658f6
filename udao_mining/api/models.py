from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional


class SupplyInfo(BaseModel):
    symbol: str = Field(description="Symbol as '<precision>,<CODE>'")
    supply: str = Field(description="Current supply as an asset string")
    max_supply: str = Field(description="Maximum supply as an asset string")
    issuer: str = Field(description="Account allowed to issue and retire")
    created_at: int = Field(description="Creation time, seconds since epoch")
    last_reward_at: int = Field(description="Last reward tranche boundary, seconds since epoch")


class LastRewardTime(BaseModel):
    symbol_code: str
    last_reward_at: int


class TierReward(BaseModel):
    symbol_code: str
    supply: str
    reward: str = Field(description="Reward minted per elapsed interval at the current supply")


class AccountBalance(BaseModel):
    contract: str = Field(description="Contract owning the balance table")
    account: str
    balance: str


class ActionPayload(BaseModel):
    action: str = Field(description="Action name, e.g. issue or transfer")
    data: Dict[str, Any] = Field(default_factory=dict)
    authorization: List[str] = Field(default_factory=list, description="Accounts that signed the action")
    now: Optional[int] = Field(None, description="Invocation time, defaults to server time")


class NotificationPayload(BaseModel):
    contract: str = Field(description="Contract that emitted the notification")
    action: str = "transfer"
    data: Dict[str, Any] = Field(default_factory=dict)
    now: Optional[int] = Field(None, description="Invocation time, defaults to server time")


class ReceiptResponse(BaseModel):
    executed: List[Dict[str, Any]]
    external_effects: List[Dict[str, Any]]
    notices: List[Dict[str, Any]]
    mining: Optional[Dict[str, Any]] = None


class ErrorResponse(BaseModel):
    detail: str
    error_code: str

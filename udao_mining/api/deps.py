import threading

from fastapi import Depends
from sqlalchemy.orm import Session

from udao_mining.config import settings
from udao_mining.database.connection import get_db
from udao_mining.runtime.dispatcher import ActionDispatcher
from udao_mining.services.accounts import AccountDirectory

# invocations are applied one at a time
invocation_lock = threading.Lock()

account_directory = AccountDirectory(settings.REGISTERED_ACCOUNTS)


def get_dispatcher(db: Session = Depends(get_db)) -> ActionDispatcher:
    return ActionDispatcher(db, accounts=account_directory)

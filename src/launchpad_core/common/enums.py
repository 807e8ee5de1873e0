from enum import Enum


class OrderSide(Enum):
    BUY = "BUY"
    SELL = "SELL"

    @classmethod
    def from_str(cls, side_str):
        if side_str.upper() == OrderSide.BUY.name:
            return OrderSide.BUY
        elif side_str.upper() == OrderSide.SELL.name:
            return OrderSide.SELL
        else:
            raise NotImplementedError(f"No order side enum for {side_str}")

    def __str__(self):
        return self.name

    def __repr__(self):
        return self.__str__()


class EventType(Enum):
    POOL_CREATED = "POOL_CREATED"
    TRADE = "TRADE"
    PAUSE_CHANGED = "PAUSE_CHANGED"
    EMERGENCY_WITHDRAWAL = "EMERGENCY_WITHDRAWAL"
    GRADUATED = "GRADUATED"

    def __str__(self):
        return self.name

    def __repr__(self):
        return self.__str__()


class WithdrawalAsset(Enum):
    RESERVE = "RESERVE"
    TOKENS = "TOKENS"

    def __str__(self):
        return self.name

    def __repr__(self):
        return self.__str__()


class Badge(Enum):
    FIXED_SUPPLY = "FIXED_SUPPLY"
    ZERO_CREATOR_FEE = "ZERO_CREATOR_FEE"
    LOW_CREATOR_FEE = "LOW_CREATOR_FEE"
    ACTIVE_TRADING = "ACTIVE_TRADING"
    GRADUATION_READY = "GRADUATION_READY"
    GRADUATED = "GRADUATED"

    @classmethod
    def from_str(cls, badge_str: str) -> "Badge":
        """
        Convert a string to a Badge enum.
        :param badge_str: str
        :return: Badge or NotImplementedError
        """
        for badge in cls:
            if badge_str.upper() == badge.name:
                return badge
        raise NotImplementedError(f"No badge enum for {badge_str}")

    def __str__(self):
        return self.name

    def __repr__(self):
        return self.__str__()

"""Skeleton for a contract reacting to a single origin event."""
from .prelude import PRELUDE

SKELETON = PRELUDE + """
contract {{CONTRACT_NAME}} is AbstractReactive {
    uint256 private constant ORIGIN_CHAIN_ID = {{ORIGIN_CHAIN_ID}};
    uint256 private constant DESTINATION_CHAIN_ID = {{DESTINATION_CHAIN_ID}};
    address private constant ORIGIN_CONTRACT = {{ORIGIN_CONTRACT}};
    address private constant DESTINATION_CONTRACT = {{DESTINATION_CONTRACT}};
    uint64 private constant CALLBACK_GAS_LIMIT = {{CALLBACK_GAS_LIMIT}};

{{EVENT_CONSTANTS}}

    constructor() payable {
        if (!vm) {
            _subscribe();
        }
    }

    /// @notice Registers the event subscription again, e.g. after it was dropped for unpaid debt.
    function subscribe() external rnOnly onlyOwner {
        _subscribe();
    }

    function react(LogRecord calldata log) external override vmOnly {
        if (log._contract == ORIGIN_CONTRACT) {
{{REACT_LOGIC}}
        }
    }

    function _subscribe() internal {
{{SUBSCRIPTIONS}}
    }
}"""

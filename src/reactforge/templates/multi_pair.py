"""Skeleton for a contract dispatching several origin events to their target functions."""
from .prelude import PRELUDE

SKELETON = PRELUDE + """
contract {{CONTRACT_NAME}} is AbstractReactive {
    uint256 private constant ORIGIN_CHAIN_ID = {{ORIGIN_CHAIN_ID}};
    uint256 private constant DESTINATION_CHAIN_ID = {{DESTINATION_CHAIN_ID}};
    address private constant ORIGIN_CONTRACT = {{ORIGIN_CONTRACT}};
    address private constant DESTINATION_CONTRACT = {{DESTINATION_CONTRACT}};
    uint64 private constant CALLBACK_GAS_LIMIT = {{CALLBACK_GAS_LIMIT}};

    // One topic constant per event/function pair, in declaration order.
{{EVENT_CONSTANTS}}

    constructor() payable {
        if (!vm) {
            _subscribe();
        }
    }

    /// @notice Registers every event subscription again, e.g. after they were dropped for unpaid debt.
    function subscribe() external rnOnly onlyOwner {
        _subscribe();
    }

    /// @dev Branches are tested in pair order; the first matching topic wins.
    function react(LogRecord calldata log) external override vmOnly {
        if (log._contract == ORIGIN_CONTRACT) {
{{REACT_LOGIC}}
        }
    }

    function _subscribe() internal {
{{SUBSCRIPTIONS}}
    }
}"""

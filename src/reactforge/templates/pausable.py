"""Skeleton for a one-shot contract that can be paused and resumed by its owner.

The contract stops reacting (`done`) once the destination contract emits any
log after a callback has been sent (`triggered`).
"""
from .prelude import PAUSABLE_PRELUDE

SKELETON = PAUSABLE_PRELUDE + """
contract {{CONTRACT_NAME}} is AbstractPausableReactive {
    event Done();

    uint256 private constant ORIGIN_CHAIN_ID = {{ORIGIN_CHAIN_ID}};
    uint256 private constant DESTINATION_CHAIN_ID = {{DESTINATION_CHAIN_ID}};
    address private constant ORIGIN_CONTRACT = {{ORIGIN_CONTRACT}};
    address private constant DESTINATION_CONTRACT = {{DESTINATION_CONTRACT}};
    uint64 private constant CALLBACK_GAS_LIMIT = {{CALLBACK_GAS_LIMIT}};

{{STATE_VARIABLES}}

{{EVENT_CONSTANTS}}

    constructor() payable {
{{CONSTRUCTOR_LOGIC}}
        if (!vm) {
            _subscribe();
        }
    }

    /// @notice Registers the event subscriptions again, e.g. after they were dropped for unpaid debt.
    function subscribe() external rnOnly onlyOwner {
        _subscribe();
    }

    function getPausableSubscriptions() internal pure override returns (Subscription[] memory) {
        Subscription[] memory result = new Subscription[]({{SUBSCRIPTION_COUNT}});
{{PAUSABLE_SUBSCRIPTIONS}}
        return result;
    }

    function react(LogRecord calldata log) external override vmOnly {
        assert(!done);

        if (log._contract == DESTINATION_CONTRACT && triggered) {
            done = true;
            emit Done();
            return;
        }

        if (log._contract == ORIGIN_CONTRACT) {
{{REACT_LOGIC}}
        }
    }

    function _subscribe() internal {
{{SUBSCRIPTIONS}}
        service.subscribe(
            DESTINATION_CHAIN_ID,
            DESTINATION_CONTRACT,
            REACTIVE_IGNORE,
            REACTIVE_IGNORE,
            REACTIVE_IGNORE,
            REACTIVE_IGNORE
        );
    }
}"""

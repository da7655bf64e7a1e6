"""
Solidity declarations shared by every generated reactive contract.

The generated file is compiled as a single source unit, so the reactive
network interfaces and abstract base contracts are inlined ahead of the
contract body instead of being imported.
"""

HEADER = """\
// SPDX-License-Identifier: UNLICENSED
pragma solidity >=0.8.0;
"""

INTERFACES = """
interface IPayer {
    /// @notice Called by the system contract or a callback proxy when payment is due.
    function pay(uint256 amount) external;

    /// @notice Lets the contract receive funds for its operational expenses.
    receive() external payable;
}

interface IReactive is IPayer {
    struct LogRecord {
        uint256 chain_id;
        address _contract;
        uint256 topic_0;
        uint256 topic_1;
        uint256 topic_2;
        uint256 topic_3;
        bytes data;
        uint256 block_number;
        uint256 op_code;
        uint256 block_hash;
        uint256 tx_hash;
        uint256 log_index;
    }

    event Callback(
        uint256 indexed chain_id,
        address indexed _contract,
        uint64 indexed gas_limit,
        bytes payload
    );

    /// @notice Entry point for new event notifications.
    function react(LogRecord calldata log) external;
}

interface IPayable {
    receive() external payable;

    /// @notice Outstanding debt of a reactive contract.
    function debt(address _contract) external view returns (uint256);
}

interface ISubscriptionService is IPayable {
    /// @notice Subscribes the caller to logs matching the criteria; REACTIVE_IGNORE matches any topic.
    function subscribe(
        uint256 chain_id,
        address _contract,
        uint256 topic_0,
        uint256 topic_1,
        uint256 topic_2,
        uint256 topic_3
    ) external;

    /// @notice Removes a subscription created with the same criteria.
    function unsubscribe(
        uint256 chain_id,
        address _contract,
        uint256 topic_0,
        uint256 topic_1,
        uint256 topic_2,
        uint256 topic_3
    ) external;
}

interface ISystemContract is IPayable, ISubscriptionService {
}
"""

ABSTRACT_REACTIVE = """
abstract contract AbstractPayer is IPayer {
    IPayable internal vendor;

    mapping(address => bool) senders;

    receive() virtual override external payable {
    }

    modifier authorizedSenderOnly() {
        require(senders[msg.sender], 'Authorized sender only');
        _;
    }

    function pay(uint256 amount) external override authorizedSenderOnly {
        _pay(payable(msg.sender), amount);
    }

    /// @notice Pays the outstanding debt to the system contract, funds permitting.
    function coverDebt() external {
        uint256 amount = vendor.debt(address(this));
        _pay(payable(vendor), amount);
    }

    function _pay(address payable recipient, uint256 amount) internal {
        require(address(this).balance >= amount, 'Insufficient funds');
        if (amount > 0) {
            (bool success,) = payable(recipient).call{value: amount}(new bytes(0));
            require(success, 'Transfer failed');
        }
    }

    function addAuthorizedSender(address sender) internal {
        senders[sender] = true;
    }

    function removeAuthorizedSender(address sender) internal {
        senders[sender] = false;
    }
}

abstract contract AbstractReactive is IReactive, AbstractPayer {
    uint256 internal constant REACTIVE_IGNORE = 0xa65f96fc951c35ead38878e0f0b7a3c744a6f5ccc1476b313353ce31712313ad;
    ISystemContract internal constant SERVICE_ADDR = ISystemContract(payable(0x0000000000000000000000000000000000fffFfF));

    /// @notice True when this copy runs inside a ReactVM rather than on the Reactive Network.
    bool internal vm;

    ISystemContract internal service;

    address internal owner;

    constructor() {
        owner = msg.sender;
        vendor = service = SERVICE_ADDR;
        addAuthorizedSender(address(SERVICE_ADDR));
        detectVm();
    }

    modifier rnOnly() {
        require(!vm, 'Reactive Network only');
        _;
    }

    modifier vmOnly() {
        require(vm, 'VM only');
        _;
    }

    modifier onlyOwner() {
        require(msg.sender == owner, 'Unauthorized');
        _;
    }

    /// @notice The system contract is only deployed on the Reactive Network, not inside a ReactVM.
    function detectVm() internal {
        uint256 size;
        // solhint-disable-next-line no-inline-assembly
        assembly { size := extcodesize(0x0000000000000000000000000000000000fffFfF) }
        vm = size == 0;
    }
}
"""

ABSTRACT_PAUSABLE_REACTIVE = """
abstract contract AbstractPausableReactive is IReactive, AbstractReactive {
    struct Subscription {
        uint256 chain_id;
        address _contract;
        uint256 topic_0;
        uint256 topic_1;
        uint256 topic_2;
        uint256 topic_3;
    }

    bool internal paused;

    /// @notice Subscriptions dropped by pause() and restored by resume().
    function getPausableSubscriptions() virtual internal view returns (Subscription[] memory);

    function pause() external rnOnly onlyOwner {
        require(!paused, 'Already paused');
        Subscription[] memory subscriptions = getPausableSubscriptions();
        for (uint256 ix = 0; ix != subscriptions.length; ++ix) {
            service.unsubscribe(
                subscriptions[ix].chain_id,
                subscriptions[ix]._contract,
                subscriptions[ix].topic_0,
                subscriptions[ix].topic_1,
                subscriptions[ix].topic_2,
                subscriptions[ix].topic_3
            );
        }
        paused = true;
    }

    function resume() external rnOnly onlyOwner {
        require(paused, 'Not paused');
        Subscription[] memory subscriptions = getPausableSubscriptions();
        for (uint256 ix = 0; ix != subscriptions.length; ++ix) {
            service.subscribe(
                subscriptions[ix].chain_id,
                subscriptions[ix]._contract,
                subscriptions[ix].topic_0,
                subscriptions[ix].topic_1,
                subscriptions[ix].topic_2,
                subscriptions[ix].topic_3
            );
        }
        paused = false;
    }
}
"""

# Prelude used by every variant that does not need pause/resume.
PRELUDE = HEADER + INTERFACES + ABSTRACT_REACTIVE

PAUSABLE_PRELUDE = PRELUDE + ABSTRACT_PAUSABLE_REACTIVE

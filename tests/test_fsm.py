from gridq.app.fsm import TrainingState, TrainingStateMachine


def test_starts_idle():
    fsm = TrainingStateMachine()
    assert fsm.is_idle()
    assert fsm.can_start()


def test_run_lifecycle():
    fsm = TrainingStateMachine()
    assert fsm.start_training()
    assert fsm.is_training()
    assert not fsm.can_start()
    assert fsm.pause()
    assert fsm.is_paused()
    assert fsm.resume()
    assert fsm.finish()
    assert fsm.current_state == TrainingState.FINISHED
    assert fsm.can_start()
    assert fsm.start_training()


def test_invalid_transitions_refused():
    fsm = TrainingStateMachine()
    assert not fsm.pause()
    assert not fsm.finish()
    assert not fsm.resume()
    assert fsm.is_idle()


def test_error_only_leads_back_to_idle():
    fsm = TrainingStateMachine()
    fsm.start_training()
    assert fsm.fail_error()
    assert not fsm.start_training()
    assert fsm.reset_to_idle()
    assert fsm.is_idle()


def test_enter_and_exit_callbacks():
    fsm = TrainingStateMachine()
    calls = []
    fsm.on_state_exit(TrainingState.IDLE, lambda ctx: calls.append(("exit", ctx)))
    fsm.on_state_enter(TrainingState.TRAINING, lambda ctx: calls.append(("enter", ctx)))
    fsm.start_training({"episodes": 3})
    assert calls == [("exit", {"episodes": 3}), ("enter", {"episodes": 3})]


def test_state_descriptions():
    fsm = TrainingStateMachine()
    assert "Ready" in fsm.get_state_description()
    fsm.start_training()
    assert fsm.get_state_description() == "Training agent with Q-Learning"

from typing import Literal, TYPE_CHECKING

from langgraph.graph import END, StateGraph

from socratix.graph.state import TurnState

if TYPE_CHECKING:
    from socratix.graph.controller import DialogueController


def route_after_analysis(state: TurnState) -> Literal["evaluate_session", "continue_dialogue"]:
    """Evaluate once enough answers are in, otherwise keep questioning."""
    if state.get("evaluation_due", False):
        return "evaluate_session"
    return "continue_dialogue"


def build_turn_graph(controller: "DialogueController"):
    """Compile the pipeline for one learner answer.

    record_answer -> analyze_response -> (evaluate_session | continue_dialogue)
    """
    workflow = StateGraph(TurnState)

    # Add nodes
    workflow.add_node("record_answer", controller.record_answer)
    workflow.add_node("analyze_response", controller.analyze_response)
    workflow.add_node("continue_dialogue", controller.continue_dialogue)
    workflow.add_node("evaluate_session", controller.evaluate_session)

    workflow.set_entry_point("record_answer")
    workflow.add_edge("record_answer", "analyze_response")
    workflow.add_conditional_edges(
        "analyze_response",
        route_after_analysis,
        {
            "evaluate_session": "evaluate_session",
            "continue_dialogue": "continue_dialogue"
        }
    )
    workflow.add_edge("continue_dialogue", END)
    workflow.add_edge("evaluate_session", END)

    return workflow.compile()

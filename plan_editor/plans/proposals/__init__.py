"""Proposal/Preview store - validated patches awaiting confirmation."""

from plan_editor.plans.proposals.repository import SqlProposalStore
from plan_editor.plans.proposals.store import InMemoryProposalStore, ProposalStore, build_proposal
from plan_editor.plans.proposals.types import PatchProposal, ProposalSummary

__all__ = [
    "InMemoryProposalStore",
    "PatchProposal",
    "ProposalStore",
    "ProposalSummary",
    "SqlProposalStore",
    "build_proposal",
]

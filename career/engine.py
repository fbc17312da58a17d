# career/engine.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple

from . import ledger, objectives, security
from .config import (
    ACADEMY_MAX_LEVEL, ACADEMY_RECRUIT_FEE, ACADEMY_UPGRADE_COST, DEFAULT_SEED,
    MANAGER_CONTRACT_YEARS, RENEWAL_FEE_WEEKS, RENEWAL_RAISE, RENEWAL_YEARS,
    STADIUM_EXPANSION_COST, STADIUM_EXPANSION_SEATS, STARTING_XI_SIZE, TIER_STRENGTH,
    Rules,
)
from .creator import (
    OPPONENTS, LocalCandidateGenerator, academy_player, initial_league, new_club, transfer_player,
)
from .errors import (
    CapacityExceeded, CareerStateError, InsufficientFunds, InvalidLineup,
    NotEmployed, OracleFailure, PlaybackActive, SeasonComplete,
)
from .rng import child_rng, matchday_rng, mix, short_id
from .roster import resolve_squad
from .save import SaveStore
from .season import SeasonSummary, advance_matchday, is_complete, rollover
from .security import CareerState
from .standings import record_opponent, simulate_round, table_for_tier, user_row
from .types import (
    FOCUSES, MENTALITIES, PLAYER_ROLES,
    Club, Financials, JobOffer, LeagueStanding, MatchResult, Player,
)
from matchsim.oracle import LocalMatchOracle, MatchOracle, MatchRequest, validate_result
from matchsim.playback import PlaybackController, PlaybackView

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Aggregate
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CareerSnapshot:
    """
    Plain-English:
      - Everything a career is at one instant: club, the AI clubs' rows,
        where the manager stands with the board, and the open offers.
      - Never edited in place. Actions build a new one and the engine swaps it.
      - The user's own standings row is not stored; it is derived from `club`.
    """
    club: Club
    standings: List[LeagueStanding]
    state: CareerState = CareerState.SECURE
    offers: List[JobOffer] = field(default_factory=list)
    history: List[SeasonSummary] = field(default_factory=list)
    transfer_list: List[Player] = field(default_factory=list)
    seed: int = DEFAULT_SEED
    last_result: Optional[MatchResult] = None
    next_id: int = 1

    @classmethod
    def new(cls, seed: int = DEFAULT_SEED, club_name: str = "Phoenix FC", manager_name: str = "Gaffer") -> "CareerSnapshot":
        return cls(
            club=new_club(seed, name=club_name, manager_name=manager_name),
            standings=initial_league(),
            seed=int(seed),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "seed": self.seed,
            "club": self.club.to_dict(),
            "standings": [r.to_dict() for r in self.standings],
            "state": self.state.value,
            "offers": [{"team_name": o.team_name, "tier": o.tier, "salary": o.salary} for o in self.offers],
            "history": [s.to_dict() for s in self.history],
            "transfer_list": [p.to_dict() for p in self.transfer_list],
            "next_id": self.next_id,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CareerSnapshot":
        return cls(
            club=Club.from_dict(d["club"]),
            standings=[LeagueStanding.from_dict(r) for r in d.get("standings", []) if r.get("name")],
            state=CareerState(d.get("state", CareerState.SECURE.value)),
            offers=[
                JobOffer(
                    team_name=str(o.get("team_name", o.get("teamName", ""))),
                    tier=int(o.get("tier", 2)),
                    salary=int(o.get("salary", 0)),
                )
                for o in d.get("offers", [])
            ],
            history=[SeasonSummary.from_dict(s) for s in d.get("history", [])],
            transfer_list=[Player.from_dict(p) for p in d.get("transfer_list", [])],
            seed=int(d.get("seed", DEFAULT_SEED)),
            next_id=int(d.get("next_id", 1)),
        )


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

class CareerEngine:
    """
    Single owner of the career. Every action either raises before touching
    anything or replaces `self.snapshot` in one assignment and saves.

    Playing a match is two-phase so the oracle can run off the UI thread:
        req = engine.prepare_match()
        result = oracle.simulate(req)          # anywhere
        engine.begin_playback(req, result)     # or engine.abort_match(req, exc)
    `start_match()` does all three inline.
    """

    def __init__(
        self,
        snapshot: Optional[CareerSnapshot] = None,
        oracle: Optional[MatchOracle] = None,
        generator: Any = None,
        store: Optional[SaveStore] = None,
        rules: Rules = Rules(),
        seed: int = DEFAULT_SEED,
    ) -> None:
        self.snapshot = snapshot or CareerSnapshot.new(seed)
        self.oracle = oracle or LocalMatchOracle(self.snapshot.seed)
        self.generator = generator or LocalCandidateGenerator(mix(self.snapshot.seed, "candidates"))
        self.store = store
        self.rules = rules
        self.speed = 1.0
        self._pending: Optional[MatchRequest] = None
        self._playback: Optional[PlaybackController] = None
        if not self.snapshot.state.in_post and not self.snapshot.offers:
            self.snapshot = replace(self.snapshot, offers=self._offers("restored"))

    @classmethod
    def load_or_new(cls, store: SaveStore, seed: int = DEFAULT_SEED, **kwargs: Any) -> "CareerEngine":
        """Resume the saved career, or start a fresh one when there is none or it is unreadable."""
        snapshot = None
        blob = store.load()
        if blob is not None:
            try:
                snapshot = CareerSnapshot.from_dict(blob)
                logger.info("Loaded career: %s, season %d matchday %d",
                            snapshot.club.name, snapshot.club.season, snapshot.club.matchday)
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                logger.warning("Save could not be restored (%s); starting a new career", e)
        return cls(snapshot=snapshot or CareerSnapshot.new(seed), store=store, **kwargs)

    # ---------- read-only views ----------

    @property
    def club(self) -> Club:
        return self.snapshot.club

    @property
    def state(self) -> CareerState:
        return self.snapshot.state

    @property
    def offers(self) -> List[JobOffer]:
        return list(self.snapshot.offers)

    @property
    def transfer_list(self) -> List[Player]:
        return list(self.snapshot.transfer_list)

    @property
    def history(self) -> List[SeasonSummary]:
        return list(self.snapshot.history)

    @property
    def last_result(self) -> Optional[MatchResult]:
        return self.snapshot.last_result

    @property
    def loading(self) -> bool:
        return self._pending is not None

    @property
    def playback_active(self) -> bool:
        return self._playback is not None and self._playback.running

    def standings(self, tier: Optional[int] = None) -> List[LeagueStanding]:
        snap = self.snapshot
        tier = snap.club.tier if tier is None else int(tier)
        return table_for_tier(snap.standings, tier, snap.club, include_user=snap.state.in_post)

    def playback_view(self) -> Optional[PlaybackView]:
        return self._playback.view() if self._playback is not None else None

    def flags(self) -> Dict[str, bool]:
        s = self.snapshot.state
        return {
            "loading": self.loading,
            "playback": self.playback_active,
            "board_talk": s is CareerState.CRISIS_PENDING,
            "pledged": s is CareerState.PLEDGED,
            "sacked": s is CareerState.SACKED,
            "unemployed": not s.in_post,
            "season_complete": is_complete(self.snapshot.club),
        }

    def next_fixture(self) -> Tuple[str, int]:
        """(opponent, strength) for the coming matchday; rotates through the tier."""
        club = self.snapshot.club
        names = [r.name for r in self.snapshot.standings if r.tier == club.tier and r.name != club.name]
        if not names:
            names = [n for n in OPPONENTS if n != club.name]
        offset = mix(self.snapshot.seed, "fixtures", club.season) % len(names)
        opponent = names[(club.matchday + offset) % len(names)]
        return opponent, TIER_STRENGTH.get(club.tier, TIER_STRENGTH[2])

    # ---------- internals ----------

    def _commit(self, snapshot: CareerSnapshot) -> None:
        self.snapshot = snapshot
        self.persist()

    def persist(self) -> bool:
        """Write the current snapshot. A failed write is logged; the career carries on."""
        if self.store is None:
            return False
        try:
            self.store.save(self.snapshot.to_dict())
        except OSError as e:
            logger.warning("Could not save career to %s: %s", self.store.path, e)
            return False
        return True

    def _require_in_post(self) -> None:
        if not self.snapshot.state.in_post:
            raise NotEmployed("You are not managing a club.")

    def _offers(self, tag: str) -> List[JobOffer]:
        club = self.snapshot.club
        by_tier: Dict[int, List[str]] = {}
        for r in self.snapshot.standings:
            if r.name != club.name:
                by_tier.setdefault(r.tier, []).append(r.name)
        return security.generate_offers(matchday_rng(self.snapshot.seed, tag, club.season, club.matchday), by_tier)

    def _allocate_pids(self, count: int) -> Tuple[List[str], int]:
        """
        `count` pids not held by anyone in the squad or on the transfer list,
        plus the counter to store. The counter lives in the snapshot, so a
        restarted engine never hands out the same id twice.
        """
        snap = self.snapshot
        taken = {p.pid for p in snap.club.players} | {p.pid for p in snap.transfer_list}
        counter = snap.next_id
        pids: List[str] = []
        while len(pids) < count:
            pid = short_id(child_rng(snap.seed, "pid", counter))
            counter += 1
            if pid not in taken:
                taken.add(pid)
                pids.append(pid)
        return pids, counter

    # ---------- match flow ----------

    def prepare_match(self) -> MatchRequest:
        if self.loading or self.playback_active:
            raise PlaybackActive("A match is already in progress.")
        self._require_in_post()
        club = self.snapshot.club
        if is_complete(club):
            raise SeasonComplete(club.matchday)
        count = len(club.starters())
        if self.rules.enforce_starting_xi and count != STARTING_XI_SIZE:
            raise InvalidLineup(count, STARTING_XI_SIZE)
        opponent, strength = self.next_fixture()
        req = MatchRequest(
            club=club,
            opponent_name=opponent,
            opponent_strength=strength,
            matchday=club.matchday + 1,
            seed=mix(self.snapshot.seed, club.season),
        )
        self._pending = req
        logger.info("Matchday %d: %s vs %s", req.matchday, club.name, opponent)
        return req

    def begin_playback(self, request: MatchRequest, result: MatchResult, speed: Optional[float] = None) -> PlaybackView:
        if request is not self._pending:
            raise CareerStateError("That match request is no longer current.")
        try:
            validate_result(result)
        except OracleFailure as e:
            self.abort_match(request, e)
            raise
        self._pending = None
        if speed is not None:
            self.speed = float(speed)
        self._playback = PlaybackController(
            result, speed=self.speed, on_complete=lambda r: self._resolve(request, r),
        )
        return self._playback.view()

    def abort_match(self, request: MatchRequest, exc: Optional[BaseException] = None) -> None:
        """Drop a prepared match; nothing about the career changes."""
        if request is self._pending:
            self._pending = None
            logger.warning("Match vs %s abandoned: %s", request.opponent_name, exc)

    def start_match(self, speed: Optional[float] = None) -> PlaybackView:
        req = self.prepare_match()
        try:
            result = self.oracle.simulate(req)
        except OracleFailure as e:
            self.abort_match(req, e)
            raise
        except Exception as e:
            self.abort_match(req, e)
            raise OracleFailure(f"Match simulation failed: {e}") from e
        return self.begin_playback(req, result, speed)

    def tick_playback(self, dt: Optional[float] = None) -> Optional[PlaybackView]:
        """One minute when dt is None, otherwise as many minutes as dt seconds cover."""
        if self._playback is None:
            return None
        if dt is None:
            self._playback.tick()
        else:
            self._playback.advance(dt)
        return self._playback.view()

    def finish_playback(self) -> Optional[PlaybackView]:
        if self._playback is None:
            return None
        self._playback.run_to_end()
        return self._playback.view()

    def cancel_playback(self) -> None:
        if self._playback is not None:
            self._playback.cancel()
            self._playback = None

    def set_speed(self, speed: float) -> None:
        if float(speed) <= 0:
            raise ValueError("playback speed must be positive")
        self.speed = float(speed)
        if self._playback is not None:
            self._playback.set_speed(speed)

    def _resolve(self, request: MatchRequest, result: MatchResult) -> None:
        """Apply a finished match: squad, money, board, table. One swap at the end."""
        snap = self.snapshot
        rules = self.rules
        club = snap.club
        opponent = request.opponent_name
        rng = matchday_rng(snap.seed, "resolve", club.season, club.matchday)

        players = resolve_squad(
            club.players, result.player_ratings, result.events, result.away_score,
            update_form=rules.update_form, rng=rng, save_filler=rules.save_filler,
        )
        club = advance_matchday(replace(club, players=players))
        club = ledger.settle_match(club, result.revenue)

        outcome = result.outcome
        t = security.after_match(snap.state, club.job_security, outcome)
        club = replace(
            club,
            job_security=t.security,
            wins=club.wins + (outcome == "W"),
            draws=club.draws + (outcome == "D"),
            losses=club.losses + (outcome == "L"),
            goals_for=club.goals_for + result.home_score,
            goals_against=club.goals_against + result.away_score,
        )
        club = objectives.evaluate(club)

        rows = record_opponent(snap.standings, opponent, result.away_score, result.home_score)
        if rules.simulate_other_fixtures:
            for tier in sorted(TIER_STRENGTH):
                skip = {club.name, opponent} if tier == club.tier else set()
                rows = simulate_round(rows, tier, skip, snap.seed, club.season * 100 + club.matchday)

        offers = list(snap.offers)
        if t.sacked:
            offers = self._offers("sacked")
            logger.info("%s sacked after matchday %d", club.manager_name, club.matchday)
        elif t.crisis_raised:
            logger.info("Board ultimatum: security %d", t.security)

        self._commit(replace(
            snap, club=club, standings=rows, state=t.state, offers=offers, last_result=result,
        ))
        logger.info("Result: %s %d-%d %s (security %d, funds %d)", club.name,
                    result.home_score, result.away_score, opponent, t.security, club.funds)

    # ---------- season ----------

    def finish_season(self) -> SeasonSummary:
        snap = self.snapshot
        if self.loading or self.playback_active:
            raise PlaybackActive("Finish the current match first.")
        if not is_complete(snap.club):
            raise CareerStateError(f"The season is not over (matchday {snap.club.matchday}).")
        club, rows, summary = rollover(snap.club, snap.standings, promotion=self.rules.promotion)
        self._commit(replace(
            snap, club=club, standings=rows, history=list(snap.history) + [summary],
            transfer_list=[], last_result=None,
        ))
        return summary

    # ---------- board / jobs ----------

    def pledge(self) -> None:
        t = security.pledge(self.snapshot.state)
        snap = self.snapshot
        self._commit(replace(snap, state=t.state, club=replace(snap.club, job_security=t.security)))
        logger.info("Manager pledged to turn it around; security reset to %d", t.security)

    def resign(self) -> None:
        snap = self.snapshot
        steps = security.resign(snap.state, snap.club.job_security)
        self._commit(replace(snap, state=steps[-1].state, offers=self._offers("resigned")))
        logger.info("%s resigned from %s", snap.club.manager_name, snap.club.name)

    def accept_job_offer(self, index: int) -> Club:
        """
        Take over the offered club. Squad and funds come along; the identity,
        tier, salary, season record, ledger, security and objectives start over.
        """
        snap = self.snapshot
        t = security.accept_offer(snap.state)
        if not 0 <= int(index) < len(snap.offers):
            raise CareerStateError(f"No job offer #{index}.")
        offer = snap.offers[int(index)]
        old_name = snap.club.name
        club = replace(
            snap.club,
            name=offer.team_name,
            tier=offer.tier,
            manager_salary=offer.salary,
            manager_contract_years=MANAGER_CONTRACT_YEARS,
            matchday=0,
            wins=0, draws=0, losses=0, goals_for=0, goals_against=0,
            point_deduction=0,
            job_security=t.security,
            financials=Financials(),
            objectives=objectives.default_objectives(),
        )
        # the new employer becomes the live user row; the club left behind keeps
        # its season record as an ordinary row in its own tier
        rows = [r for r in snap.standings if r.name != offer.team_name]
        if not any(r.name == old_name for r in rows):
            rows.append(user_row(snap.club))
        self._commit(replace(snap, club=club, standings=rows, state=t.state, offers=[], transfer_list=[]))
        logger.info("%s takes charge of %s (tier %d, salary %d)", club.manager_name, club.name, club.tier, club.manager_salary)
        return club

    # ---------- squad ----------

    def _player(self, pid: str) -> Player:
        p = self.snapshot.club.player(pid)
        if p is None:
            raise KeyError(pid)
        return p

    def _replace_player(self, club: Club, player: Player) -> Club:
        return replace(club, players=[player if p.pid == player.pid else p for p in club.players])

    def renew_contract(self, pid: str) -> Player:
        self._require_in_post()
        p = self._player(pid)
        salary = int(p.salary * RENEWAL_RAISE)
        fee = salary * RENEWAL_FEE_WEEKS
        club = ledger.charge(self.snapshot.club, fee, "contract_renewal", f"Renewed {p.name}")
        renewed = replace(p, salary=salary, contract_years=RENEWAL_YEARS)
        self._commit(replace(self.snapshot, club=self._replace_player(club, renewed)))
        return renewed

    def toggle_starting_lineup(self, pid: str) -> List[str]:
        self._require_in_post()
        self._player(pid)
        club = self.snapshot.club
        xi = list(club.tactics.starting_xi)
        if pid in xi:
            xi.remove(pid)
        elif len(xi) >= STARTING_XI_SIZE:
            raise CapacityExceeded(f"The starting XI already has {STARTING_XI_SIZE} players.")
        else:
            xi.append(pid)
        self._commit(replace(self.snapshot, club=replace(club, tactics=replace(club.tactics, starting_xi=xi))))
        return xi

    def update_tactics(self, **partial: Any) -> None:
        allowed = {"formation", "mentality", "focus", "role_assignments"}
        unknown = set(partial) - allowed
        if unknown:
            raise ValueError(f"unknown tactics fields: {sorted(unknown)}")
        if "mentality" in partial and partial["mentality"] not in MENTALITIES:
            raise ValueError(f"unknown mentality {partial['mentality']!r}")
        if "focus" in partial and partial["focus"] not in FOCUSES:
            raise ValueError(f"unknown focus {partial['focus']!r}")
        if "role_assignments" in partial:
            roles = dict(partial["role_assignments"])
            bad = [r for r in roles.values() if r not in PLAYER_ROLES]
            if bad:
                raise ValueError(f"unknown player roles: {bad}")
            partial["role_assignments"] = {**self.snapshot.club.tactics.role_assignments, **roles}
        club = self.snapshot.club
        self._commit(replace(self.snapshot, club=replace(club, tactics=replace(club.tactics, **partial))))

    # ---------- transfers / academy / stadium ----------

    def fetch_transfer_market(self) -> List[Player]:
        self._require_in_post()
        raw = self.generator.transfer_market(self.snapshot.club.average_rating())
        pids, next_id = self._allocate_pids(len(raw))
        rng = child_rng(self.snapshot.seed, "scouting", self.snapshot.next_id)
        players = [transfer_player(r, rng, pid) for r, pid in zip(raw, pids)]
        self._commit(replace(self.snapshot, transfer_list=players, next_id=next_id))
        return players

    def buy_player(self, pid: str) -> Player:
        self._require_in_post()
        snap = self.snapshot
        target = next((p for p in snap.transfer_list if p.pid == pid), None)
        if target is None:
            raise KeyError(pid)
        club = ledger.charge(snap.club, target.market_value, "transfer", f"Signed {target.name}")
        club = replace(club, players=list(club.players) + [target])
        self._commit(replace(
            snap, club=club, transfer_list=[p for p in snap.transfer_list if p.pid != pid],
        ))
        logger.info("Signed %s for %d", target.name, target.market_value)
        return target

    def recruit_academy_prospect(self) -> Player:
        self._require_in_post()
        club = self.snapshot.club
        if ACADEMY_RECRUIT_FEE > club.funds:
            raise InsufficientFunds(ACADEMY_RECRUIT_FEE, club.funds, "an academy prospect")
        [pid], next_id = self._allocate_pids(1)
        rng = child_rng(self.snapshot.seed, "academy", self.snapshot.next_id)
        prospect = academy_player(self.generator.academy_prospect(club.academy_level), rng, pid)
        club = ledger.charge(club, ACADEMY_RECRUIT_FEE, "academy_recruit", f"Promoted {prospect.name}")
        club = replace(club, players=list(club.players) + [prospect], academy_promotions=club.academy_promotions + 1)
        self._commit(replace(self.snapshot, club=objectives.evaluate(club), next_id=next_id))
        return prospect

    def upgrade_academy_facility(self) -> int:
        self._require_in_post()
        club = self.snapshot.club
        if club.academy_level >= ACADEMY_MAX_LEVEL:
            raise CapacityExceeded(f"The academy is already at level {ACADEMY_MAX_LEVEL}.")
        cost = ACADEMY_UPGRADE_COST * club.academy_level
        club = ledger.charge(club, cost, "academy_upgrade", f"Academy level {club.academy_level + 1}")
        club = replace(club, academy_level=club.academy_level + 1)
        self._commit(replace(self.snapshot, club=club))
        return club.academy_level

    def expand_stadium(self) -> int:
        self._require_in_post()
        club = self.snapshot.club
        st = club.stadium
        cost = STADIUM_EXPANSION_COST * st.facility_level
        club = ledger.charge(club, cost, "stadium_expansion", f"{st.name} expansion")
        club = replace(club, stadium=replace(
            st, capacity=st.capacity + STADIUM_EXPANSION_SEATS, facility_level=st.facility_level + 1,
        ))
        self._commit(replace(self.snapshot, club=objectives.evaluate(club)))
        return club.stadium.capacity

    # ---------- objectives / persistence ----------

    def claim_objective(self, oid: str) -> int:
        self._require_in_post()
        club = self.snapshot.club
        obj = next((o for o in club.objectives if o.oid == oid), None)
        if obj is None or not obj.completed or obj.claimed:
            raise CareerStateError("That reward is not available.")
        club = ledger.credit(club, obj.reward, "objective_reward", obj.title)
        club = replace(club, objectives=[replace(o, claimed=True) if o.oid == oid else o for o in club.objectives])
        self._commit(replace(self.snapshot, club=club))
        return obj.reward

    def save_now(self) -> Optional[str]:
        if not self.persist():
            return None
        logger.info("Career saved to %s", self.store.path)
        return self.store.path

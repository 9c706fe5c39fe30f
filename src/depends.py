from datetime import datetime
from decimal import Decimal
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.adapter.repositories.booking_repository import SqlAlchemyBookingRepository
from src.adapter.repositories.class_repository import (
    SqlAlchemyClassInstanceRepository,
    SqlAlchemyClassTemplateRepository,
)
from src.adapter.repositories.credit_account_repository import SqlAlchemyCreditAccountRepository
from src.adapter.repositories.credit_transaction_repository import SqlAlchemyCreditTransactionRepository
from src.adapter.repositories.point_transaction_repository import SqlAlchemyPointTransactionRepository
from src.adapter.repositories.subscription_repository import SqlAlchemySubscriptionRepository
from src.adapter.repositories.user_repository import SqlAlchemyUserRepository
from src.adapter.repositories.venue_repository import SqlAlchemyReviewRepository, SqlAlchemyVenueRepository
from src.adapter.services.entity_writer import SqlAlchemyEntityWriter
from src.adapter.services.follow_up_scheduler import SqlAlchemyOutboxScheduler
from src.adapter.services.refund_policy import CancellationWindowRefundPolicy
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.propagation.engine import ChangePropagator
from src.app.propagation.registry import register_handlers
from src.app.services.ledger_service import LedgerService
from src.app.services.points_service import PointsService
from src.app.use_cases.bookings import BookClass, PriceBooking, TransitionBooking
from src.app.use_cases.catalog import UpdateClassTemplate, UpdateVenue
from src.app.use_cases.credits import (
    AllocateSubscriptionCredits,
    ApplyCreditTransaction,
    GetBalance,
    GrantCredits,
    ReconcileBalances,
)
from src.app.use_cases.points import AddPoints, RedeemPoints
from src.app.use_cases.reviews import SubmitReview
from src.app.use_cases.users import UpdateUserProfile


class Services:
    """
    Every repository, service and use case bound to one session

    One Services instance is one unit of work: build it per operation (or per
    worker batch) and let it go when the session closes.
    """

    def __init__(self, session: AsyncSession, config=ApplicationConfig, clock=datetime.utcnow):
        self.session = session
        self.uow = SqlAlchemyUnitOfWork(session)

        self.account_repo = SqlAlchemyCreditAccountRepository(session)
        self.transaction_repo = SqlAlchemyCreditTransactionRepository(session)
        self.user_repo = SqlAlchemyUserRepository(session)
        self.point_repo = SqlAlchemyPointTransactionRepository(session)
        self.subscription_repo = SqlAlchemySubscriptionRepository(session)
        self.template_repo = SqlAlchemyClassTemplateRepository(session)
        self.instance_repo = SqlAlchemyClassInstanceRepository(session)
        self.booking_repo = SqlAlchemyBookingRepository(session)
        self.venue_repo = SqlAlchemyVenueRepository(session)
        self.review_repo = SqlAlchemyReviewRepository(session)

        self.ledger_service = LedgerService(self.account_repo, self.transaction_repo)
        self.points_service = PointsService(self.user_repo, self.point_repo)
        self.refund_policy = CancellationWindowRefundPolicy(config.LATE_CANCELLATION_REFUND_RATE)

        self.propagator = ChangePropagator(SqlAlchemyOutboxScheduler(session))
        self.writer = SqlAlchemyEntityWriter(session, self.propagator)
        register_handlers(
            self.propagator,
            self.writer,
            self.ledger_service,
            self.instance_repo,
            self.venue_repo,
            self.review_repo,
            self.subscription_repo,
            welcome_bonus_credits=Decimal(str(config.WELCOME_BONUS_CREDITS)),
        )

        ratio = config.CREDITS_TO_CENTS_RATIO

        self.apply_credit_transaction = ApplyCreditTransaction(self.uow, self.ledger_service)
        self.grant_credits = GrantCredits(self.uow, self.ledger_service)
        self.get_balance = GetBalance(self.account_repo)
        self.allocate_subscription_credits = AllocateSubscriptionCredits(
            self.uow, self.subscription_repo, self.ledger_service, self.writer
        )
        self.reconcile_balances = ReconcileBalances(
            self.account_repo, self.transaction_repo, self.user_repo, self.point_repo
        )

        self.add_points = AddPoints(self.uow, self.user_repo, self.points_service)
        self.redeem_points = RedeemPoints(self.uow, self.user_repo, self.points_service)

        self.price_booking = PriceBooking(self.instance_repo, self.template_repo, ratio, clock)
        self.book_class = BookClass(
            self.uow,
            self.instance_repo,
            self.template_repo,
            self.booking_repo,
            self.ledger_service,
            self.writer,
            ratio,
            clock,
        )
        self.transition_booking = TransitionBooking(
            self.uow,
            self.booking_repo,
            self.instance_repo,
            self.template_repo,
            self.ledger_service,
            self.points_service,
            self.refund_policy,
            self.writer,
            config.BOOKING_CASHBACK_RATE,
            clock,
        )

        self.update_venue = UpdateVenue(self.uow, self.venue_repo, self.writer)
        self.update_class_template = UpdateClassTemplate(self.uow, self.template_repo, self.writer)
        self.update_user_profile = UpdateUserProfile(self.uow, self.user_repo, self.writer)
        self.submit_review = SubmitReview(self.uow, self.venue_repo, self.writer)

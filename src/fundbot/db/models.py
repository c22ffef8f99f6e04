from sqlalchemy import Column, Date, DECIMAL, Integer, String
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class Client(Base):
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, autoincrement=True)
    clientId = Column("client_id", String(32), index=True)
    name = Column(String(255))
    pan = Column(String(10), index=True)
    mobile = Column(String(15), index=True)
    email = Column(String(255))
    DOB = Column("dob", Date)
    city = Column(String(100))
    address = Column(String)


class Valuation(Base):
    __tablename__ = "valuation_summary"

    id = Column(Integer, primary_key=True, autoincrement=True)
    clientId = Column("client_id", String(32), index=True)
    arn_id = Column(String(32), index=True)
    agentCode = Column("agent_code", String(32), index=True)
    cur_val = Column(DECIMAL(18, 4))
    units = Column(DECIMAL(18, 4))
    pur_nav = Column(DECIMAL(18, 4))


class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    clientId = Column("client_id", String(32), index=True)
    fundDesc = Column("fund_desc", String(255))
    transDate = Column("trans_date", Date, index=True)
    procDate = Column("proc_date", Date)
    amt = Column(DECIMAL(18, 2))
    appTransType = Column("app_trans_type", String(32))
    appTransDesc = Column("app_trans_desc", String(255))
    folioNumber = Column("folio_number", String(32))
    unit = Column(DECIMAL(18, 4))
    nav = Column(DECIMAL(18, 4))
    transStatus = Column("trans_status", String(32))


# Collection name -> mapped model
COLLECTIONS = {
    "clients": Client,
    "valuations": Valuation,
    "transactions": Transaction,
}
